"""Tests for the authentication gateway."""

from src.models.user import Credential
from src.services.auth import AuthGateway
from src.services.storage import InMemoryRecordStorage, JsonFileStorage


class TestBootstrap:
    """Tests for seeding the credential store."""

    def test_fresh_store_seeds_admin(self, storage):
        """Test that a fresh environment accepts admin/admin123."""
        gateway = AuthGateway(storage)
        assert gateway.authenticate("admin", "admin123") is True

    def test_seed_is_persisted(self, storage):
        """Test that the seed account is written back immediately."""
        AuthGateway(storage)
        result = storage.load("users")
        assert result.found
        assert result.records == [{"username": "admin", "password": "admin123"}]

    def test_corrupt_file_seeds_admin(self, tmp_path, audit_logger, event_types):
        """Test that an unreadable users file is replaced by the seed."""
        (tmp_path / "users.json").write_text("{broken", encoding="utf-8")
        gateway = AuthGateway(JsonFileStorage(tmp_path), audit_logger=audit_logger)

        assert gateway.authenticate("admin", "admin123") is True
        assert event_types() == ["storage_load_failed", "credentials_seeded"]

    def test_empty_store_seeds_admin(self):
        """Test that an empty stored collection is seeded."""
        storage = InMemoryRecordStorage({"users": []})
        assert AuthGateway(storage).authenticate("admin", "admin123") is True

    def test_invalid_records_seed_admin(self):
        """Test that malformed or duplicate records count as unreadable."""
        storage = InMemoryRecordStorage({"users": [
            {"username": "bob", "password": "a"},
            {"username": "bob", "password": "b"},
        ]})
        gateway = AuthGateway(storage)
        assert gateway.store.usernames == ["admin"]

    def test_existing_store_is_not_reseeded(self):
        """Test that stored users are kept and no admin is added."""
        storage = InMemoryRecordStorage({"users": [{"username": "bob", "password": "pw"}]})
        gateway = AuthGateway(storage)
        assert gateway.authenticate("bob", "pw") is True
        assert gateway.authenticate("admin", "admin123") is False

    def test_custom_seed(self, storage):
        """Test a configured seed account."""
        gateway = AuthGateway(storage, seed=Credential(username="root", password="toor"))
        assert gateway.authenticate("root", "toor") is True
        assert gateway.authenticate("admin", "admin123") is False

    def test_custom_key(self, storage):
        """Test that the collection key is configurable."""
        AuthGateway(storage, key="accounts")
        assert storage.keys() == ["accounts"]


class TestAuthenticate:
    """Tests for authenticate()."""

    def test_wrong_password(self, storage):
        """Test rejection of a wrong password."""
        assert AuthGateway(storage).authenticate("admin", "wrong") is False

    def test_unknown_user(self, storage):
        """Test rejection of an unknown user."""
        assert AuthGateway(storage).authenticate("nobody", "admin123") is False

    def test_case_sensitive(self, storage):
        """Test both fields are compared case-sensitively."""
        gateway = AuthGateway(storage)
        assert gateway.authenticate("Admin", "admin123") is False
        assert gateway.authenticate("admin", "Admin123") is False


class TestRegister:
    """Tests for register()."""

    def test_register_then_authenticate(self, storage):
        """Test a new account can log in straight away."""
        gateway = AuthGateway(storage)
        assert gateway.register("alice", "wonderland") is True
        assert gateway.authenticate("alice", "wonderland") is True

    def test_register_persists_full_collection(self, storage):
        """Test the whole store is written after registration."""
        gateway = AuthGateway(storage)
        gateway.register("alice", "wonderland")
        assert storage.load("users").records == [
            {"username": "admin", "password": "admin123"},
            {"username": "alice", "password": "wonderland"},
        ]
        assert gateway.last_save.ok is True

    def test_duplicate_username_rejected(self, storage):
        """Test an existing username neither duplicates nor overwrites."""
        gateway = AuthGateway(storage)
        assert gateway.register("admin", "hijacked") is False
        assert gateway.authenticate("admin", "admin123") is True
        assert gateway.authenticate("admin", "hijacked") is False
        assert gateway.store.usernames == ["admin"]
        assert len(storage.load("users").records) == 1

    def test_usernames_differing_in_case_are_distinct(self, storage):
        """Test case-sensitive uniqueness."""
        gateway = AuthGateway(storage)
        assert gateway.register("Admin", "other") is True
        assert gateway.authenticate("Admin", "other") is True
        assert gateway.authenticate("admin", "admin123") is True

    def test_empty_username_rejected(self, storage):
        """Test that an empty username cannot be registered."""
        gateway = AuthGateway(storage)
        assert gateway.register("", "pw") is False
        assert gateway.store.usernames == ["admin"]

    def test_long_username_accepted(self, storage):
        """Test that a long username registers and logs in."""
        gateway = AuthGateway(storage)
        username = "u" * 101
        assert gateway.register(username, "pw") is True
        assert gateway.authenticate(username, "pw") is True
        assert storage.load("users").records[-1] == {"username": username, "password": "pw"}

    def test_accounts_survive_restart(self, tmp_path):
        """Test registration is visible to a new gateway on the same files."""
        AuthGateway(JsonFileStorage(tmp_path)).register("alice", "wonderland")
        restarted = AuthGateway(JsonFileStorage(tmp_path))
        assert restarted.authenticate("alice", "wonderland") is True
        assert restarted.authenticate("admin", "admin123") is True

    def test_save_failure_is_not_fatal(self, failing_storage, audit_logger, event_types):
        """Test registration succeeds in memory when the save fails."""
        gateway = AuthGateway(failing_storage, audit_logger=audit_logger)
        assert gateway.register("alice", "wonderland") is True
        assert gateway.authenticate("alice", "wonderland") is True
        assert gateway.authenticate("admin", "admin123") is True
        assert gateway.last_save.ok is False
        assert event_types() == [
            "credentials_seeded",
            "storage_save_failed",
            "storage_save_failed",
        ]
        assert failing_storage.save_attempts == 2
