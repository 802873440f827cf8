"""Tests for configuration loading."""

from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

from src.config import (
    AppSettings,
    StorageSettings,
    TaxSettings,
    get_settings,
    validate_all_settings,
)


class TestDefaults:
    """Tests for default configuration."""

    def test_storage_defaults(self):
        """Test the default data file layout."""
        settings = StorageSettings()
        assert settings.backend == "json"
        assert settings.data_dir == Path("data")
        assert settings.tax_rates_key == "tax_rates"
        assert settings.users_key == "users"
        assert settings.audit_log_path == Path("data") / "audit.jsonl"

    def test_tax_defaults(self):
        """Test the standard deduction and lenient rate table mode."""
        settings = TaxSettings()
        assert settings.standard_deduction == Decimal("5000")
        assert settings.strict_rate_table is False

    def test_auth_defaults(self):
        """Test the seed administrator account."""
        auth = get_settings().auth
        assert auth.seed_username == "admin"
        assert auth.seed_password == "admin123"

    def test_all_settings_valid(self):
        """Test validate_all_settings on a clean environment."""
        results = validate_all_settings()
        assert results == {"storage": True, "tax": True, "auth": True, "app": True}


class TestEnvironmentOverrides:
    """Tests for environment variable overrides."""

    def test_storage_overrides(self, monkeypatch):
        """Test backend and directory from the environment."""
        monkeypatch.setenv("TAX_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("TAX_STORAGE_DATA_DIR", "/tmp/tax")
        monkeypatch.setenv("TAX_STORAGE_AUDIT_LOG_FILE", "")
        settings = StorageSettings()
        assert settings.backend == "memory"
        assert settings.data_dir == Path("/tmp/tax")
        assert settings.audit_log_path is None

    def test_unknown_backend_rejected(self, monkeypatch):
        """Test backend validation."""
        monkeypatch.setenv("TAX_STORAGE_BACKEND", "postgres")
        with pytest.raises(ValidationError):
            StorageSettings()

    def test_negative_standard_deduction_rejected(self, monkeypatch):
        """Test standard deduction bounds."""
        monkeypatch.setenv("TAX_STANDARD_DEDUCTION", "-1")
        with pytest.raises(ValidationError):
            TaxSettings()

    def test_log_level_is_normalized(self, monkeypatch):
        """Test log level case handling."""
        monkeypatch.setenv("APP_LOG_LEVEL", "debug")
        assert AppSettings().log_level == "DEBUG"

    def test_invalid_log_level_reported(self, monkeypatch):
        """Test validate_all_settings reports a broken section."""
        monkeypatch.setenv("APP_LOG_LEVEL", "chatty")
        results = validate_all_settings()
        assert results["app"] is False
        assert "app_error" in results
        assert results["tax"] is True

    def test_get_settings_is_cached(self):
        """Test the settings container is built once."""
        assert get_settings() is get_settings()
