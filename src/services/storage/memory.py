"""
In-Memory Storage Implementation

Non-persistent backend used by tests and by TAX_STORAGE_BACKEND=memory.
Records are deep-copied on the way in and out so callers can never
mutate what is "stored".
"""

import copy
from typing import Optional

from src.models.audit import AuditEvent
from src.services.storage.interface import (
    AuditStorageInterface,
    LoadResult,
    Record,
    RecordStorageInterface,
    SaveResult,
)


class InMemoryRecordStorage(RecordStorageInterface):
    """Dict-backed record storage."""

    def __init__(self, initial: Optional[dict[str, list[Record]]] = None):
        self._collections: dict[str, list[Record]] = copy.deepcopy(initial or {})

    def load(self, key: str) -> LoadResult:
        if key not in self._collections:
            return LoadResult.missing(key)
        return LoadResult.loaded(key, copy.deepcopy(self._collections[key]))

    def save(self, key: str, records: list[Record]) -> SaveResult:
        self._collections[key] = copy.deepcopy(records)
        return SaveResult(key=key, ok=True)

    def keys(self) -> list[str]:
        return sorted(self._collections)


class InMemoryAuditStorage(AuditStorageInterface):
    """List-backed audit log."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
