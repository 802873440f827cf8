"""Shared fixtures."""

import pytest

from src.audit import AuditLogger
from src.config import get_settings
from src.services.storage import InMemoryAuditStorage, InMemoryRecordStorage, SaveResult


class FailingSaveStorage(InMemoryRecordStorage):
    """In-memory storage whose writes always fail."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.save_attempts = 0

    def save(self, key, records):
        self.save_attempts += 1
        return SaveResult(key=key, ok=False, error="OSError: disk full")


@pytest.fixture
def storage():
    return InMemoryRecordStorage()


@pytest.fixture
def failing_storage():
    return FailingSaveStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def event_types(audit_storage):
    """Callable returning the audited event types, oldest first."""
    def _event_types():
        return [e.event_type.value for e in reversed(audit_storage.get_recent_events(limit=1000))]
    return _event_types


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep tests away from the real data directory and any .env file."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "TAX_STORAGE_BACKEND",
        "TAX_STORAGE_DATA_DIR",
        "TAX_STORAGE_AUDIT_LOG_FILE",
        "TAX_STANDARD_DEDUCTION",
        "TAX_STRICT_RATE_TABLE",
        "AUTH_SEED_USERNAME",
        "AUTH_SEED_PASSWORD",
        "APP_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
