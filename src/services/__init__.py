"""
Services package.

- storage: persistence gateway (JSON files, in-memory)
- tax: rate table repository and tax engine
- auth: credential checks and registration

Only the storage layer is re-exported here; the audit logger depends on it,
and the tax/auth services depend on the audit logger.
"""

from src.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryRecordStorage,
    JsonFileStorage,
    JsonLinesAuditStorage,
    LoadResult,
    LoadStatus,
    RecordStorageInterface,
    SaveResult,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryRecordStorage",
    "JsonFileStorage",
    "JsonLinesAuditStorage",
    "LoadResult",
    "LoadStatus",
    "RecordStorageInterface",
    "SaveResult",
    "StorageError",
]
