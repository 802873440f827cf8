"""
Audit Models for the Tax Calculator

Every significant action in the system is logged for audit purposes:
logins, registrations, calculations, and every storage fallback.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.

Passwords never appear in an audit event, only usernames.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Authentication
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    USER_REGISTERED = "user_registered"
    REGISTRATION_REJECTED = "registration_rejected"
    CREDENTIALS_SEEDED = "credentials_seeded"

    # Rate table
    RATE_TABLE_LOADED = "rate_table_loaded"
    RATE_TABLE_DEFAULTED = "rate_table_defaulted"
    RATE_TABLE_INVALID = "rate_table_invalid"

    # Calculation
    TAX_CALCULATED = "tax_calculated"
    BRACKET_NOT_FOUND = "bracket_not_found"

    # Persistence
    STORAGE_LOAD_FAILED = "storage_load_failed"
    STORAGE_SAVE_FAILED = "storage_save_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'user', 'rate_table', 'calculation')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Identifier of the entity (username, storage key, ...)"
    )

    # Correlation - ties together the events of one session
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one login session)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.login_succeeded("admin", correlation_id)
        event = AuditEventBuilder.storage_save_failed("users", "disk full")
    """

    @staticmethod
    def login_succeeded(
        username: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="user",
            entity_id=username,
            correlation_id=correlation_id,
            description="User logged in",
            is_user_action=True,
        )

    @staticmethod
    def login_failed(
        username: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=username,
            correlation_id=correlation_id,
            description="Login failed: unknown user or wrong password",
            is_user_action=True,
        )

    @staticmethod
    def user_registered(
        username: str,
        persisted: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            entity_type="user",
            entity_id=username,
            correlation_id=correlation_id,
            description="User registered",
            details={"persisted": persisted},
            is_user_action=True,
        )

    @staticmethod
    def registration_rejected(
        username: str,
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=username,
            correlation_id=correlation_id,
            description=f"Registration rejected: {reason}",
            details={"reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def credentials_seeded(username: str, key: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CREDENTIALS_SEEDED,
            entity_type="user",
            entity_id=username,
            description="Credential store empty or unreadable; seeded administrator account",
            details={"key": key},
        )

    @staticmethod
    def rate_table_loaded(key: str, bracket_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATE_TABLE_LOADED,
            entity_type="rate_table",
            entity_id=key,
            description=f"Rate table loaded with {bracket_count} brackets",
            details={"bracket_count": bracket_count},
        )

    @staticmethod
    def rate_table_defaulted(key: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATE_TABLE_DEFAULTED,
            entity_type="rate_table",
            entity_id=key,
            description=f"Using default rate table: {reason}",
            details={"reason": reason},
        )

    @staticmethod
    def rate_table_invalid(key: str, issues: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATE_TABLE_INVALID,
            severity=AuditSeverity.WARNING,
            entity_type="rate_table",
            entity_id=key,
            description=f"Stored rate table has {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def tax_calculated(
        taxable_income: Decimal,
        tax_payable: Decimal,
        rate: Optional[Decimal],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TAX_CALCULATED,
            entity_type="calculation",
            correlation_id=correlation_id,
            description=f"Tax calculated: {tax_payable:.2f}",
            details={
                "taxable_income": str(taxable_income),
                "tax_payable": str(tax_payable),
                "rate": str(rate) if rate is not None else None,
            },
            is_user_action=True,
        )

    @staticmethod
    def bracket_not_found(
        taxable_income: Decimal,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BRACKET_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="calculation",
            correlation_id=correlation_id,
            description=f"No bracket matches taxable income {taxable_income}; tax set to 0",
            details={"taxable_income": str(taxable_income)},
        )

    @staticmethod
    def storage_load_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="storage",
            entity_id=key,
            description=f"Could not read '{key}'; falling back to defaults",
            error_message=error_message,
        )

    @staticmethod
    def storage_save_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="storage",
            entity_id=key,
            description=f"Could not save '{key}'; keeping in-memory state",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
