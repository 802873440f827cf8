"""
Credential Models

DESIGN DECISION: Credentials are stored and compared in plaintext, the
format existing account files use. Hashing would change the persisted
format, and hardening is out of scope for this tool. Do not reuse these
files for anything that needs real security.
"""

from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


class Credential(BaseModel):
    """
    A username/password pair.

    No whitespace stripping: both fields are compared with exact,
    case-sensitive string equality.
    """
    model_config = ConfigDict(frozen=True)

    username: str = Field(
        ...,
        min_length=1,
        description="Unique login name"
    )
    password: str = Field(
        ...,
        description="Plaintext password"
    )

    def matches(self, username: str, password: str) -> bool:
        return self.username == username and self.password == password


class CredentialStore(BaseModel):
    """
    The set of known credentials.

    Usernames are unique. The store is only ever appended to.
    """

    credentials: list[Credential] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.credentials

    @property
    def usernames(self) -> list[str]:
        return [c.username for c in self.credentials]

    def has_username(self, username: str) -> bool:
        return any(c.username == username for c in self.credentials)

    def find(self, username: str) -> Optional[Credential]:
        for credential in self.credentials:
            if credential.username == username:
                return credential
        return None

    def matches(self, username: str, password: str) -> bool:
        """True iff an exact-match credential exists."""
        return any(c.matches(username, password) for c in self.credentials)

    def add(self, credential: Credential) -> None:
        """
        Append a credential.

        Raises:
            ValueError: If the username is already taken
        """
        if self.has_username(credential.username):
            raise ValueError(f"Username already exists: {credential.username}")
        self.credentials.append(credential)

    def to_records(self) -> list[dict[str, Any]]:
        """Serialize to JSON-compatible records for storage."""
        return [c.model_dump(mode="json") for c in self.credentials]

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> 'CredentialStore':
        """
        Build a store from stored records.

        Raises:
            pydantic.ValidationError: If a record is malformed
            ValueError: If a username appears twice
        """
        store = cls()
        for record in records:
            store.add(Credential.model_validate(record))
        return store
