"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements JSON files and in-memory backends, but designed to be
swappable.
"""

from src.services.storage.interface import (
    AuditStorageInterface,
    InvalidKeyError,
    LoadResult,
    LoadStatus,
    Record,
    RecordStorageInterface,
    SaveResult,
    StorageError,
)
from src.services.storage.json_files import (
    JsonFileStorage,
    JsonLinesAuditStorage,
)
from src.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryRecordStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "RecordStorageInterface",
    # Results
    "LoadResult",
    "LoadStatus",
    "Record",
    "SaveResult",
    # Exceptions
    "InvalidKeyError",
    "StorageError",
    # JSON file implementation
    "JsonFileStorage",
    "JsonLinesAuditStorage",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryRecordStorage",
]
