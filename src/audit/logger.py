"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of logins, registrations and calculations
2. Visibility of every storage fallback (defaults, seeds, failed saves)
3. Debugging capability

The audit logger:
- Is synchronous; the whole application is single-threaded
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace the events of one session
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from src.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_log_level(level: str) -> None:
    """Route stdlib logging (and so structlog output) at the given level."""
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger().setLevel(level)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("tax_calculator.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_login(
        self,
        username: str,
        succeeded: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a login attempt."""
        if succeeded:
            event = AuditEventBuilder.login_succeeded(username, correlation_id)
        else:
            event = AuditEventBuilder.login_failed(username, correlation_id)
        self.log(event)

    def log_user_registered(
        self,
        username: str,
        persisted: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful registration."""
        self.log(AuditEventBuilder.user_registered(username, persisted, correlation_id))

    def log_registration_rejected(
        self,
        username: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected registration."""
        self.log(AuditEventBuilder.registration_rejected(username, reason, correlation_id))

    def log_credentials_seeded(self, username: str, key: str) -> None:
        """Log creation of the seed account."""
        self.log(AuditEventBuilder.credentials_seeded(username, key))

    def log_rate_table_loaded(self, key: str, bracket_count: int) -> None:
        self.log(AuditEventBuilder.rate_table_loaded(key, bracket_count))

    def log_rate_table_defaulted(self, key: str, reason: str) -> None:
        self.log(AuditEventBuilder.rate_table_defaulted(key, reason))

    def log_rate_table_invalid(self, key: str, issues: list[str]) -> None:
        self.log(AuditEventBuilder.rate_table_invalid(key, issues))

    def log_tax_calculated(
        self,
        taxable_income: Decimal,
        tax_payable: Decimal,
        rate: Optional[Decimal],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a completed calculation."""
        self.log(AuditEventBuilder.tax_calculated(
            taxable_income=taxable_income,
            tax_payable=tax_payable,
            rate=rate,
            correlation_id=correlation_id,
        ))

    def log_bracket_not_found(
        self,
        taxable_income: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.bracket_not_found(taxable_income, correlation_id))

    def log_storage_load_failed(self, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_load_failed(key, error_message))

    def log_storage_save_failed(self, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_save_failed(key, error_message))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a session (e.g., a login).
    Pass it through all subsequent operations.
    """
    return uuid4()
