"""
Main Orchestrator for the Tax Calculator

This module ties together all the components and defines the
end-to-end flows for:
1. Login / Registration (credentials → AuthGateway)
2. Calculation (figures → TaxEngine → breakdown)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No calculation without a successful login
- Every user action is audited
- Storage problems never stop the session

Components are explicit objects built once by create_app_components();
nothing here keeps module-level state.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from src.audit import AuditLogger, configure_log_level, create_correlation_id
from src.config import Settings, get_settings
from src.models.tax import IncomeRecord, RateTable, TaxBreakdown
from src.models.user import Credential
from src.services.auth import AuthGateway
from src.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryRecordStorage,
    JsonFileStorage,
    JsonLinesAuditStorage,
    RecordStorageInterface,
)
from src.services.tax import InvalidRateTableError, RateTableRepository, TaxEngine


class LoginFlow:
    """
    Orchestrates login and registration.

    A successful login opens a session: its correlation ID ties together
    every later event of that user.
    """

    def __init__(
        self,
        auth_gateway: AuthGateway,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._auth = auth_gateway
        self._audit_logger = audit_logger or AuditLogger()

    def login(
        self,
        username: str,
        password: str,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[UUID]:
        """
        Check credentials.

        Returns:
            The session correlation ID on success, None otherwise
        """
        correlation_id = correlation_id or create_correlation_id()
        succeeded = self._auth.authenticate(username, password)
        self._audit_logger.log_login(username, succeeded, correlation_id)
        return correlation_id if succeeded else None

    def register(
        self,
        username: str,
        password: str,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[bool, str]:
        """
        Create an account.

        Returns:
            (success, user_message)
        """
        if self._auth.register(username, password):
            saved = self._auth.last_save
            persisted = saved is not None and saved.ok
            self._audit_logger.log_user_registered(username, persisted, correlation_id)
            if not persisted:
                return True, (
                    "Registration successful, but the account could not be saved "
                    "and will be lost when the application stops."
                )
            return True, "Registration successful. Please log in."

        if not username:
            reason = "username is empty"
        elif self._auth.store.has_username(username):
            reason = "username already exists"
        else:
            reason = "username is not valid"
        self._audit_logger.log_registration_rejected(username, reason, correlation_id)
        return False, f"Registration failed: {reason}."


class TaxCalculationFlow:
    """
    Orchestrates one tax calculation.

    The engine stays pure; auditing of results and of the zero-tax
    fallback for unmatched brackets happens here.
    """

    def __init__(
        self,
        tax_engine: TaxEngine,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._engine = tax_engine
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def rate_table(self) -> RateTable:
        return self._engine.rate_table

    @property
    def engine(self) -> TaxEngine:
        return self._engine

    def calculate(
        self,
        record: IncomeRecord,
        correlation_id: Optional[UUID] = None,
    ) -> TaxBreakdown:
        """
        Compute the tax breakdown for a record.

        Raises:
            InvalidRateTableError: In strict mode, if no bracket matches
        """
        try:
            breakdown = self._engine.explain(record)
        except InvalidRateTableError as e:
            self._audit_logger.log_error(
                error_type="invalid_rate_table",
                error_message=str(e),
                details={"issues": e.issues},
                correlation_id=correlation_id,
            )
            raise

        if breakdown.is_taxable and not breakdown.bracket_matched:
            self._audit_logger.log_bracket_not_found(
                breakdown.taxable_income,
                correlation_id,
            )

        self._audit_logger.log_tax_calculated(
            taxable_income=breakdown.taxable_income,
            tax_payable=breakdown.tax_payable,
            rate=breakdown.bracket.rate if breakdown.bracket else None,
            correlation_id=correlation_id,
        )
        return breakdown


@dataclass
class AppComponents:
    """Everything the UI needs for one session."""

    login_flow: LoginFlow
    tax_flow: TaxCalculationFlow
    auth_gateway: AuthGateway
    rate_table_repository: RateTableRepository
    audit_logger: AuditLogger


def create_storage(settings: Settings) -> tuple[RecordStorageInterface, Optional[AuditStorageInterface]]:
    """Build the record and audit backends selected in settings."""
    storage_settings = settings.storage

    if storage_settings.backend == "memory":
        return InMemoryRecordStorage(), InMemoryAuditStorage()

    record_storage = JsonFileStorage(storage_settings.data_dir)
    audit_path = storage_settings.audit_log_path
    audit_storage = JsonLinesAuditStorage(audit_path) if audit_path else None
    return record_storage, audit_storage


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[RecordStorageInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use; defaults to get_settings()
        storage: Record storage overriding the configured backend
        audit_storage: Audit storage overriding the configured backend

    Returns:
        AppComponents with the rate table and credentials already loaded
    """
    settings = settings or get_settings()
    configure_log_level(settings.app.log_level)

    if storage is None:
        storage, configured_audit = create_storage(settings)
        audit_storage = audit_storage or configured_audit

    audit_logger = AuditLogger(audit_storage)

    auth_settings = settings.auth
    auth_gateway = AuthGateway(
        storage=storage,
        key=settings.storage.users_key,
        seed=Credential(
            username=auth_settings.seed_username,
            password=auth_settings.seed_password,
        ),
        audit_logger=audit_logger,
    )

    repository = RateTableRepository(
        storage=storage,
        key=settings.storage.tax_rates_key,
        audit_logger=audit_logger,
    )
    tax_settings = settings.tax
    tax_engine = TaxEngine(
        rate_table=repository.load(),
        standard_deduction=tax_settings.standard_deduction,
        strict=tax_settings.strict_rate_table,
    )

    return AppComponents(
        login_flow=LoginFlow(auth_gateway, audit_logger),
        tax_flow=TaxCalculationFlow(tax_engine, audit_logger),
        auth_gateway=auth_gateway,
        rate_table_repository=repository,
        audit_logger=audit_logger,
    )
