"""
Tax Data Models

These models define the schemas for the progressive rate table and for
the figures a user enters for one calculation.

DESIGN DECISION: Money is Decimal, never float. The quick-deduction
arithmetic is then exact, and continuity at bracket boundaries is
checked to the cent.

DESIGN DECISION: The unbounded top bracket has upper_bound=None.
JSON has no infinity, and None round-trips through storage unchanged.
"""

from decimal import Decimal
from typing import Any, Iterable, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


ZERO = Decimal("0")

# Fixed allowance subtracted before bracket lookup (currency units)
STANDARD_DEDUCTION = Decimal("5000")


# =============================================================================
# RATE TABLE
# =============================================================================

class TaxBracket(BaseModel):
    """
    One tier of the progressive rate table.

    A bracket covers (lower_bound, upper_bound]: the lower bound is
    exclusive and the upper bound inclusive.
    """
    model_config = ConfigDict(frozen=True)

    lower_bound: Decimal = Field(
        ...,
        ge=0,
        description="Exclusive lower bound of taxable income"
    )
    upper_bound: Optional[Decimal] = Field(
        default=None,
        description="Inclusive upper bound; None means unbounded"
    )
    rate: Decimal = Field(
        ...,
        ge=0,
        le=1,
        description="Marginal rate as a fraction (0.03 = 3%)"
    )
    quick_deduction: Decimal = Field(
        default=ZERO,
        ge=0,
        description="Precomputed deduction keeping the tax function continuous"
    )

    @model_validator(mode='after')
    def validate_bounds(self) -> 'TaxBracket':
        """Upper bound must lie above the lower bound."""
        if self.upper_bound is not None and self.upper_bound <= self.lower_bound:
            raise ValueError("Upper bound must be greater than lower bound")
        return self

    @property
    def is_unbounded(self) -> bool:
        return self.upper_bound is None

    def contains(self, amount: Decimal) -> bool:
        """Check whether a taxable income falls into this bracket."""
        if amount <= self.lower_bound:
            return False
        return self.is_unbounded or amount <= self.upper_bound

    def tax_at(self, amount: Decimal) -> Decimal:
        """Tax for an amount using this bracket's rate and quick deduction."""
        return amount * self.rate - self.quick_deduction


class RateTable(BaseModel):
    """
    Ordered set of progressive tax brackets.

    The brackets are expected to partition [0, +inf) and to carry quick
    deductions that make the tax function continuous. Neither is enforced
    at construction: a malformed table can still be loaded from storage,
    and `partition_issues()` / `continuity_issues()` report what is wrong.
    """
    model_config = ConfigDict(frozen=True)

    brackets: tuple[TaxBracket, ...] = Field(
        default=(),
        description="Brackets in ascending order"
    )

    def partition_issues(self) -> list[str]:
        """
        List every way the brackets fail to partition [0, +inf).

        An empty list means the table is well formed.
        """
        if not self.brackets:
            return ["Rate table has no brackets"]

        issues = []
        first = self.brackets[0]
        if first.lower_bound != ZERO:
            issues.append(f"First bracket starts at {first.lower_bound}, not 0")

        for index, (prev, current) in enumerate(
            zip(self.brackets, self.brackets[1:]), start=1
        ):
            if prev.is_unbounded:
                issues.append(
                    f"Bracket {index - 1} is unbounded but is not the last bracket"
                )
            elif current.lower_bound != prev.upper_bound:
                kind = "Gap" if current.lower_bound > prev.upper_bound else "Overlap"
                issues.append(
                    f"{kind} between bracket {index - 1} (upper {prev.upper_bound}) "
                    f"and bracket {index} (lower {current.lower_bound})"
                )

        if not self.brackets[-1].is_unbounded:
            issues.append("Last bracket must be unbounded")

        return issues

    def continuity_issues(self, tolerance: Decimal = Decimal("0.01")) -> list[str]:
        """
        List boundaries where the tax jumps.

        At each shared boundary the tax computed with the lower bracket
        must equal the tax computed with the upper one.
        """
        issues = []
        for index, (prev, current) in enumerate(
            zip(self.brackets, self.brackets[1:]), start=1
        ):
            if prev.is_unbounded:
                continue
            boundary = prev.upper_bound
            below = prev.tax_at(boundary)
            above = current.tax_at(boundary)
            if abs(below - above) > tolerance:
                issues.append(
                    f"Tax jumps at {boundary}: {below} in bracket {index - 1} "
                    f"vs {above} in bracket {index}"
                )
        return issues

    @property
    def is_valid(self) -> bool:
        """Partitioned and continuous."""
        return not self.partition_issues() and not self.continuity_issues()

    def to_records(self) -> list[dict[str, Any]]:
        """Serialize to JSON-compatible records for storage."""
        return [bracket.model_dump(mode="json") for bracket in self.brackets]

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> 'RateTable':
        """
        Build a table from stored records.

        Raises:
            pydantic.ValidationError: If a record is malformed
        """
        return cls(brackets=tuple(TaxBracket.model_validate(r) for r in records))

    @classmethod
    def from_marginal_rates(
        cls,
        tiers: Iterable[tuple[Optional[Decimal], Decimal]],
    ) -> 'RateTable':
        """
        Build a continuous table from (upper_bound, rate) tiers.

        Quick deductions are derived so that each bracket agrees with the
        previous one at their shared boundary:
            qd[i] = qd[i-1] + lower[i] * (rate[i] - rate[i-1])

        Pass None as the last upper bound for the unbounded top tier.
        """
        brackets = []
        lower = ZERO
        prev_rate = ZERO
        quick_deduction = ZERO
        for upper, rate in tiers:
            upper = None if upper is None else Decimal(upper)
            rate = Decimal(rate)
            quick_deduction += lower * (rate - prev_rate)
            brackets.append(TaxBracket(
                lower_bound=lower,
                upper_bound=upper,
                rate=rate,
                quick_deduction=quick_deduction,
            ))
            if upper is None:
                break
            lower = upper
            prev_rate = rate
        return cls(brackets=tuple(brackets))


def default_rate_table() -> RateTable:
    """Annual comprehensive income rate table used when none is stored."""
    rows = [
        ("0", "36000", "0.03", "0"),
        ("36000", "144000", "0.10", "2520"),
        ("144000", "300000", "0.20", "16920"),
        ("300000", "420000", "0.25", "31920"),
        ("420000", "660000", "0.30", "52920"),
        ("660000", "960000", "0.35", "85920"),
        ("960000", None, "0.45", "181920"),
    ]
    return RateTable(brackets=tuple(
        TaxBracket(
            lower_bound=Decimal(lower),
            upper_bound=Decimal(upper) if upper is not None else None,
            rate=Decimal(rate),
            quick_deduction=Decimal(deduction),
        )
        for lower, upper, rate, deduction in rows
    ))


# =============================================================================
# CALCULATION INPUT / OUTPUT
# =============================================================================

class IncomeRecord(BaseModel):
    """
    Figures entered for one calculation.

    Transient: built per request and discarded afterwards.
    Negative values are not rejected here; the input form only offers
    non-negative fields.
    """

    salary_income: Decimal = Field(default=ZERO, description="Salary income")
    bonus_income: Decimal = Field(default=ZERO, description="Bonus income")
    social_security: Decimal = Field(
        default=ZERO,
        description="Social security contributions"
    )
    provident_fund: Decimal = Field(
        default=ZERO,
        description="Housing provident fund contributions"
    )
    other_deductions: Decimal = Field(default=ZERO, description="Other deductions")

    @property
    def total_income(self) -> Decimal:
        return self.salary_income + self.bonus_income

    @property
    def total_deductions(self) -> Decimal:
        return self.social_security + self.provident_fund + self.other_deductions


class TaxBreakdown(BaseModel):
    """
    Every intermediate quantity of one tax computation.

    `bracket` is None when taxable income is non-positive, or when the
    rate table has no bracket for it.
    """

    total_income: Decimal
    total_deductions: Decimal
    standard_deduction: Decimal
    taxable_income: Decimal
    bracket: Optional[TaxBracket] = None
    tax_payable: Decimal = ZERO

    @property
    def is_taxable(self) -> bool:
        return self.taxable_income > ZERO

    @property
    def bracket_matched(self) -> bool:
        return self.bracket is not None

    @property
    def effective_rate(self) -> Decimal:
        """Tax payable as a fraction of total income."""
        if self.total_income <= ZERO:
            return ZERO
        return self.tax_payable / self.total_income

    def to_report(self) -> str:
        """Render the breakdown as plain text, amounts to two decimals."""
        if not self.is_taxable:
            return "Taxable Income: 0 (No tax payable)"

        lines = [
            "Calculation Details:",
            f"Total Income: {self.total_income:.2f}",
            f"Total Deductions: {self.total_deductions:.2f}",
            f"Standard Deduction: {self.standard_deduction:.2f}",
            f"Taxable Income: {self.taxable_income:.2f}",
        ]
        if self.bracket is not None:
            lines.extend([
                f"Applicable Tax Rate: {self.bracket.rate * 100:.0f}%",
                f"Quick Deduction: {self.bracket.quick_deduction:.2f}",
            ])
        else:
            lines.append("Applicable Tax Rate: none (no matching bracket)")
        lines.append(f"Tax Payable: {self.tax_payable:.2f}")
        return "\n".join(lines)
