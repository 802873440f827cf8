"""Tests for the tax engine."""

import pytest
from decimal import Decimal

from src.models.tax import IncomeRecord, RateTable, TaxBracket, default_rate_table
from src.services.tax import InvalidRateTableError, TaxEngine


def make_record(salary="0", bonus="0", social_security="0", provident_fund="0", other="0"):
    return IncomeRecord(
        salary_income=Decimal(salary),
        bonus_income=Decimal(bonus),
        social_security=Decimal(social_security),
        provident_fund=Decimal(provident_fund),
        other_deductions=Decimal(other),
    )


def gapped_table() -> RateTable:
    return RateTable(brackets=(
        TaxBracket(lower_bound=Decimal("0"), upper_bound=Decimal("1000"), rate=Decimal("0.10")),
        TaxBracket(lower_bound=Decimal("2000"), rate=Decimal("0.20"), quick_deduction=Decimal("200")),
    ))


@pytest.fixture
def engine():
    return TaxEngine(default_rate_table())


class TestTaxableIncome:
    """Tests for taxable income derivation."""

    def test_subtracts_deductions_and_standard_deduction(self, engine):
        """Test income - deductions - 5000."""
        record = make_record(salary="20000", social_security="2000", provident_fund="1000")
        assert engine.compute_taxable_income(record) == Decimal("12000")

    def test_may_be_negative(self, engine):
        """Test that low income gives negative taxable income, not an error."""
        assert engine.compute_taxable_income(make_record(salary="3000")) == Decimal("-2000")

    def test_custom_standard_deduction(self):
        """Test a configured standard deduction."""
        engine = TaxEngine(default_rate_table(), standard_deduction=Decimal("6000"))
        assert engine.compute_taxable_income(make_record(salary="20000")) == Decimal("14000")


class TestComputeTax:
    """Tests for compute_tax."""

    def test_lowest_bracket(self, engine):
        """Test salary=20000, deductions 3000 → taxable 12000 → 360.00."""
        record = make_record(salary="20000", social_security="2000", provident_fund="1000")
        assert engine.compute_tax(record) == Decimal("360.00")

    def test_second_bracket(self, engine):
        """Test salary=50000, bonus=30000, deductions 8000 → 4180.00."""
        record = make_record(
            salary="50000",
            bonus="30000",
            social_security="5000",
            provident_fund="2000",
            other="1000",
        )
        assert engine.compute_tax(record) == Decimal("4180.00")

    def test_negative_taxable_income_is_zero(self, engine):
        """Test salary=3000 → taxable -2000 → 0."""
        assert engine.compute_tax(make_record(salary="3000")) == Decimal("0")

    def test_zero_taxable_income_is_zero(self, engine):
        """Test taxable income of exactly 0."""
        assert engine.compute_tax(make_record(salary="5000")) == Decimal("0")

    @pytest.mark.parametrize("salary,deductions", [
        ("0", "0"),
        ("4999.99", "0"),
        ("10000", "5000"),
        ("100000", "95000"),
    ])
    def test_non_positive_taxable_income_floor(self, engine, salary, deductions):
        """Test that tax is exactly 0 whenever taxable income <= 0."""
        record = make_record(salary=salary, other=deductions)
        assert engine.compute_tax(record) == Decimal("0")

    def test_upper_boundary_belongs_to_lower_bracket(self, engine):
        """Test taxable income exactly 36000 uses the 3% bracket."""
        breakdown = engine.explain(make_record(salary="41000"))
        assert breakdown.taxable_income == Decimal("36000")
        assert breakdown.bracket.rate == Decimal("0.03")
        assert breakdown.tax_payable == Decimal("1080")

    def test_just_above_boundary_uses_next_bracket(self, engine):
        """Test taxable income 36000.01 uses the 10% bracket."""
        breakdown = engine.explain(make_record(salary="41000.01"))
        assert breakdown.bracket.rate == Decimal("0.10")
        assert breakdown.tax_payable == Decimal("1080.001")

    def test_top_bracket(self, engine):
        """Test taxable income of one million."""
        record = make_record(salary="1005000")
        assert engine.compute_tax(record) == Decimal("268080")

    def test_continuous_at_every_boundary(self, engine):
        """Test adjacent brackets agree at each shared boundary."""
        brackets = engine.rate_table.brackets
        for lower, upper in zip(brackets, brackets[1:]):
            boundary = lower.upper_bound
            assert lower.tax_at(boundary) == upper.tax_at(boundary)

            at_boundary = engine.compute_tax(make_record(salary=str(boundary + 5000)))
            just_above = engine.compute_tax(
                make_record(salary=str(boundary + Decimal("5000.01")))
            )
            assert abs(just_above - at_boundary) < Decimal("0.01")

    def test_idempotent(self, engine):
        """Test identical inputs give identical results."""
        record = make_record(salary="250000", bonus="12345.67", social_security="999")
        first = engine.compute_tax(record)
        second = engine.compute_tax(record)
        assert first == second
        assert engine.rate_table == default_rate_table()

    def test_rate_table_argument_overrides_engine_table(self, engine):
        """Test computing with a different table."""
        flat = RateTable.from_marginal_rates([(None, Decimal("0.10"))])
        record = make_record(salary="17000")
        assert engine.compute_tax(record, flat) == Decimal("1200")
        assert engine.compute_tax(record) == Decimal("360")


class TestUnmatchedBracket:
    """Tests for malformed rate tables."""

    def test_returns_zero_by_default(self):
        """Test that a gap yields zero tax."""
        engine = TaxEngine(gapped_table())
        breakdown = engine.explain(make_record(salary="6500"))
        assert breakdown.taxable_income == Decimal("1500")
        assert breakdown.bracket is None
        assert breakdown.tax_payable == Decimal("0")
        assert "no matching bracket" in breakdown.to_report()

    def test_matched_income_still_taxed(self):
        """Test that incomes inside a bracket are unaffected by the gap."""
        engine = TaxEngine(gapped_table())
        assert engine.compute_tax(make_record(salary="5500")) == Decimal("50")

    def test_strict_mode_raises(self):
        """Test that strict mode turns the gap into an error."""
        engine = TaxEngine(gapped_table(), strict=True)
        with pytest.raises(InvalidRateTableError) as exc_info:
            engine.compute_tax(make_record(salary="6500"))
        assert exc_info.value.taxable_income == Decimal("1500")
        assert any(issue.startswith("Gap") for issue in exc_info.value.issues)

    def test_strict_mode_still_floors_at_zero(self):
        """Test that non-positive taxable income never raises."""
        engine = TaxEngine(gapped_table(), strict=True)
        assert engine.compute_tax(make_record(salary="100")) == Decimal("0")


class TestExplain:
    """Tests for explain()."""

    def test_breakdown_has_every_intermediate_value(self, engine):
        """Test the breakdown for the 67000 scenario."""
        record = make_record(salary="50000", bonus="30000", social_security="8000")
        breakdown = engine.explain(record)
        assert breakdown.total_income == Decimal("80000")
        assert breakdown.total_deductions == Decimal("8000")
        assert breakdown.standard_deduction == Decimal("5000")
        assert breakdown.taxable_income == Decimal("67000")
        assert breakdown.bracket.rate == Decimal("0.10")
        assert breakdown.bracket.quick_deduction == Decimal("2520")
        assert breakdown.tax_payable == Decimal("4180")

    def test_breakdown_agrees_with_compute_tax(self, engine):
        """Test that explain and compute_tax share one result."""
        record = make_record(salary="400000", provident_fund="12000")
        assert engine.explain(record).tax_payable == engine.compute_tax(record)

    def test_non_taxable_breakdown(self, engine):
        """Test the breakdown when nothing is owed."""
        breakdown = engine.explain(make_record(salary="3000"))
        assert breakdown.is_taxable is False
        assert breakdown.bracket is None
        assert breakdown.to_report() == "Taxable Income: 0 (No tax payable)"
