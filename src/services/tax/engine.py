"""
Tax Engine

Computes taxable income and tax payable from a progressive rate table
using the quick-deduction method:

    taxable = (salary + bonus) - (social security + provident fund + other) - 5000
    tax     = taxable * rate - quick_deduction     (bracket containing taxable)

DESIGN DECISION: There is exactly one evaluation path. explain() builds
the full breakdown and compute_tax() returns its final figure, so the
explanation a user sees can never disagree with the number they get.

DESIGN DECISION: When no bracket matches (a gap or inverted ordering in a
hand-edited table) the engine returns zero tax and the caller is told
through TaxBreakdown.bracket_matched.
Pass strict=True to raise InvalidRateTableError instead.
"""

from decimal import Decimal
from typing import Optional

from src.models.tax import (
    STANDARD_DEDUCTION,
    ZERO,
    IncomeRecord,
    RateTable,
    TaxBracket,
    TaxBreakdown,
)


class TaxEngineError(Exception):
    """Base exception for tax computation."""
    pass


class InvalidRateTableError(TaxEngineError):
    """No bracket of the rate table covers the taxable income."""

    def __init__(self, taxable_income: Decimal, issues: Optional[list[str]] = None):
        self.taxable_income = taxable_income
        self.issues = issues or []
        message = f"No tax bracket matches taxable income {taxable_income}"
        if self.issues:
            message += f" ({'; '.join(self.issues)})"
        super().__init__(message)


class TaxEngine:
    """
    Pure tax calculator bound to one rate table.

    The engine holds no mutable state: the same record and table always
    produce the same result.
    """

    def __init__(
        self,
        rate_table: RateTable,
        standard_deduction: Decimal = STANDARD_DEDUCTION,
        strict: bool = False,
    ):
        self._rate_table = rate_table
        self._standard_deduction = Decimal(standard_deduction)
        self._strict = strict

    @property
    def rate_table(self) -> RateTable:
        return self._rate_table

    @property
    def standard_deduction(self) -> Decimal:
        return self._standard_deduction

    @property
    def strict(self) -> bool:
        return self._strict

    def compute_taxable_income(self, record: IncomeRecord) -> Decimal:
        """
        Total income minus deductions minus the standard deduction.

        May be negative; inputs are not validated here.
        """
        return record.total_income - record.total_deductions - self._standard_deduction

    def find_bracket(
        self,
        taxable_income: Decimal,
        rate_table: Optional[RateTable] = None,
    ) -> Optional[TaxBracket]:
        """First bracket, in ascending order, with lower < income <= upper."""
        table = rate_table if rate_table is not None else self._rate_table
        for bracket in table.brackets:
            if bracket.contains(taxable_income):
                return bracket
        return None

    def explain(
        self,
        record: IncomeRecord,
        rate_table: Optional[RateTable] = None,
    ) -> TaxBreakdown:
        """
        Compute tax and return every intermediate quantity.

        Args:
            record: Income and deduction figures
            rate_table: Table to use instead of the engine's own

        Raises:
            InvalidRateTableError: In strict mode, if no bracket matches
        """
        table = rate_table if rate_table is not None else self._rate_table
        taxable_income = self.compute_taxable_income(record)

        breakdown = TaxBreakdown(
            total_income=record.total_income,
            total_deductions=record.total_deductions,
            standard_deduction=self._standard_deduction,
            taxable_income=taxable_income,
        )

        # Non-positive taxable income: nothing owed
        if taxable_income <= ZERO:
            return breakdown

        bracket = self.find_bracket(taxable_income, table)
        if bracket is None:
            if self._strict:
                raise InvalidRateTableError(taxable_income, table.partition_issues())
            return breakdown

        return breakdown.model_copy(update={
            "bracket": bracket,
            "tax_payable": bracket.tax_at(taxable_income),
        })

    def compute_tax(
        self,
        record: IncomeRecord,
        rate_table: Optional[RateTable] = None,
    ) -> Decimal:
        """
        Tax payable for a record; zero when taxable income is non-positive.

        Raises:
            InvalidRateTableError: In strict mode, if no bracket matches
        """
        return self.explain(record, rate_table).tax_payable
