"""
Data Models Package

This package contains all Pydantic models used by the tax calculator.
All data flowing through the system must conform to these schemas.
"""

from src.models.tax import (
    STANDARD_DEDUCTION,
    IncomeRecord,
    RateTable,
    TaxBracket,
    TaxBreakdown,
    default_rate_table,
)
from src.models.user import (
    Credential,
    CredentialStore,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Tax models
    "STANDARD_DEDUCTION",
    "IncomeRecord",
    "RateTable",
    "TaxBracket",
    "TaxBreakdown",
    "default_rate_table",
    # User models
    "Credential",
    "CredentialStore",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
