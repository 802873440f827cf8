"""
Authentication Gateway

Checks and creates username/password credentials.

DESIGN DECISION: Credentials are kept in plaintext and compared with
exact string equality, matching the existing user files. There is no
hashing, lockout or rate limiting.

Bootstrap: if the credential collection is missing, unreadable or empty,
the store is seeded with a single administrator account and persisted.
"""

from typing import Optional

from pydantic import ValidationError

from src.audit import AuditLogger
from src.models.user import Credential, CredentialStore
from src.services.storage import LoadStatus, RecordStorageInterface, SaveResult


DEFAULT_SEED = Credential(username="admin", password="admin123")


class AuthGateway:
    """
    Owns the credential store for the lifetime of the process.

    Every successful registration is persisted immediately. A failed save
    is audited, and the in-memory store stays authoritative for the rest
    of the session.
    """

    def __init__(
        self,
        storage: RecordStorageInterface,
        key: str = "users",
        seed: Credential = DEFAULT_SEED,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._key = key
        self._seed = seed
        self._audit_logger = audit_logger or AuditLogger()
        self._last_save: Optional[SaveResult] = None
        self._store = self._load_or_seed()

    @property
    def store(self) -> CredentialStore:
        return self._store

    @property
    def last_save(self) -> Optional[SaveResult]:
        """Outcome of the most recent write of the credential collection."""
        return self._last_save

    def authenticate(self, username: str, password: str) -> bool:
        """True iff an exact-match credential exists (case-sensitive)."""
        return self._store.matches(username, password)

    def register(self, username: str, password: str) -> bool:
        """
        Create a new credential.

        Returns:
            False if the username is empty or already taken,
            True once the credential is added (even if persisting it failed)
        """
        if self._store.has_username(username):
            return False

        try:
            credential = Credential(username=username, password=password)
        except ValidationError:
            return False

        self._store.add(credential)
        self._save(self._store)
        return True

    def _load_or_seed(self) -> CredentialStore:
        result = self._storage.load(self._key)

        if result.status == LoadStatus.CORRUPT:
            self._audit_logger.log_storage_load_failed(self._key, result.error or "")
        elif result.found:
            try:
                store = CredentialStore.from_records(result.records or [])
            except ValueError as e:
                self._audit_logger.log_storage_load_failed(self._key, str(e))
            else:
                if not store.is_empty:
                    return store

        store = CredentialStore(credentials=[self._seed])
        self._audit_logger.log_credentials_seeded(self._seed.username, self._key)
        self._save(store)
        return store

    def _save(self, store: CredentialStore) -> SaveResult:
        result = self._storage.save(self._key, store.to_records())
        self._last_save = result
        if not result.ok:
            self._audit_logger.log_storage_save_failed(self._key, result.error or "")
        return result
