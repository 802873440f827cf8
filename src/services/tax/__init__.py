"""Tax computation services."""

from src.services.tax.engine import (
    InvalidRateTableError,
    TaxEngine,
    TaxEngineError,
)
from src.services.tax.repository import RateTableRepository

__all__ = [
    "InvalidRateTableError",
    "RateTableRepository",
    "TaxEngine",
    "TaxEngineError",
]
