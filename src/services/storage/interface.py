"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap JSON files for a real database later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple: whole named collections of
records are loaded and saved at once. There are no partial updates.

DESIGN DECISION: load() and save() report failure through a result
object instead of raising. A missing or corrupt collection is an
expected state (callers fall back to defaults), and a failed save must
not abort the in-memory operation that triggered it.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.models.audit import AuditEvent


Record = dict[str, Any]


class LoadStatus(str, Enum):
    """Outcome of loading a collection."""
    FOUND = "found"
    MISSING = "missing"    # Nothing stored under the key yet
    CORRUPT = "corrupt"    # Stored data could not be read or parsed


class LoadResult(BaseModel):
    """Result of RecordStorageInterface.load()."""

    key: str
    status: LoadStatus
    records: Optional[list[Record]] = None
    error: Optional[str] = Field(
        default=None,
        description="Why the load failed (CORRUPT only)"
    )

    @property
    def found(self) -> bool:
        return self.status == LoadStatus.FOUND

    @classmethod
    def loaded(cls, key: str, records: list[Record]) -> 'LoadResult':
        return cls(key=key, status=LoadStatus.FOUND, records=records)

    @classmethod
    def missing(cls, key: str) -> 'LoadResult':
        return cls(key=key, status=LoadStatus.MISSING)

    @classmethod
    def corrupt(cls, key: str, error: str) -> 'LoadResult':
        return cls(key=key, status=LoadStatus.CORRUPT, error=error)


class SaveResult(BaseModel):
    """Result of RecordStorageInterface.save()."""

    key: str
    ok: bool
    error: Optional[str] = None


class RecordStorageInterface(ABC):
    """
    Abstract interface for named record collections.

    Any storage implementation (JSON files, SQLite, etc.)
    must implement these methods.
    """

    @abstractmethod
    def load(self, key: str) -> LoadResult:
        """
        Load the collection stored under a key.

        Args:
            key: Collection name (e.g. 'tax_rates', 'users')

        Returns:
            FOUND with the records, MISSING if nothing is stored,
            or CORRUPT if the stored data is unreadable.
            Never raises for I/O or parse errors.
        """
        pass

    @abstractmethod
    def save(self, key: str, records: list[Record]) -> SaveResult:
        """
        Replace the collection stored under a key.

        Args:
            key: Collection name
            records: JSON-compatible records

        Returns:
            SaveResult with ok=False and the error if the write failed.
            Never raises for I/O errors.
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class InvalidKeyError(StorageError, ValueError):
    """Collection key contains characters that are not allowed."""
    pass
