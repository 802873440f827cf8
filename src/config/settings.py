"""
Configuration Management for the Tax Calculator

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage locations, the standard deduction and the seed administrator
account are all visible in one place and validated at startup.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where rate tables, users and audit events are persisted."""

    model_config = SettingsConfigDict(
        env_prefix="TAX_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="json",
        pattern="^(json|memory)$",
        description="Storage backend: 'json' files or 'memory' (non-persistent)"
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the JSON data files"
    )

    # Record collection keys (one file per key)
    tax_rates_key: str = Field(
        default="tax_rates",
        pattern="^[A-Za-z0-9_-]+$",
        description="Key of the tax rate table collection"
    )
    users_key: str = Field(
        default="users",
        pattern="^[A-Za-z0-9_-]+$",
        description="Key of the credential collection"
    )
    audit_log_file: Optional[str] = Field(
        default="audit.jsonl",
        description="Audit log file inside data_dir (empty to disable)"
    )

    @property
    def audit_log_path(self) -> Optional[Path]:
        """Full path of the audit log, or None when disabled."""
        if not self.audit_log_file:
            return None
        return self.data_dir / self.audit_log_file


class TaxSettings(BaseSettings):
    """Tax computation configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TAX_",
        extra="ignore"
    )

    standard_deduction: Decimal = Field(
        default=Decimal("5000"),
        ge=0,
        description="Fixed allowance subtracted before bracket lookup"
    )
    strict_rate_table: bool = Field(
        default=False,
        description="Raise instead of returning zero tax when no bracket matches"
    )


class AuthSettings(BaseSettings):
    """Authentication configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        extra="ignore"
    )

    # NOTE: credentials are stored and compared in plaintext
    seed_username: str = Field(
        default="admin",
        min_length=1,
        description="Username of the account created on an empty store"
    )
    seed_password: str = Field(
        default="admin123",
        description="Password of the account created on an empty store"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level for structured logging"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept any case, store upper case."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def tax(self) -> TaxSettings:
        return TaxSettings()

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with a
    `<name>_error` entry for each failure.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "tax", "auth", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
