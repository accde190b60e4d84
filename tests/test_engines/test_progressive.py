"""Tests for ProgressiveTaxEngine: tax, marginal rate and bracket breakdown.

Expected values are hand-computed from the annual comprehensive income table
with the 60,000 CNY standard deduction.
"""

from decimal import Decimal, InvalidOperation

import pytest

from equitytax.engines.brackets import CHINA_IIT_BRACKETS
from equitytax.engines.progressive import ProgressiveTaxEngine
from equitytax.exceptions import ScheduleError
from equitytax.models.tax_bracket import TaxBracket

INCOMES = [
    Decimal("0"),
    Decimal("59999.99"),
    Decimal("60000"),
    Decimal("96000"),
    Decimal("96000.01"),
    Decimal("123456.78"),
    Decimal("204000"),
    Decimal("360000"),
    Decimal("480000"),
    Decimal("500000"),
    Decimal("720000"),
    Decimal("1020000"),
    Decimal("2000000"),
    Decimal("98765432.10"),
]


class TestComputeTax:
    def test_scenario_500k(self, engine):
        result = engine.compute_tax(Decimal("500000"))
        assert result.taxable_income == Decimal("440000")
        assert result.bracket == CHINA_IIT_BRACKETS[4]
        assert result.tax == Decimal("79080")
        assert result.effective_rate == Decimal("0.15816")

    def test_zero_income(self, engine):
        result = engine.compute_tax(Decimal("0"))
        assert result.tax == Decimal("0")
        assert result.effective_rate == Decimal("0")
        assert result.bracket == CHINA_IIT_BRACKETS[0]

    def test_income_equal_to_deduction(self, engine):
        result = engine.compute_tax(Decimal("60000"))
        assert result.taxable_income == Decimal("0")
        assert result.tax == Decimal("0")
        assert result.effective_rate == Decimal("0")
        assert result.bracket == CHINA_IIT_BRACKETS[0]

    def test_income_below_deduction(self, engine):
        result = engine.compute_tax(Decimal("30000"))
        assert result.taxable_income == Decimal("0")
        assert result.tax == Decimal("0")

    def test_boundary_belongs_to_lower_bracket(self, engine):
        result = engine.compute_tax(Decimal("96000"))
        assert result.taxable_income == Decimal("36000")
        assert result.bracket == CHINA_IIT_BRACKETS[0]
        assert result.tax == Decimal("1080")

    def test_just_above_boundary_selects_next_bracket(self, engine):
        result = engine.compute_tax(Decimal("96000.01"))
        assert result.bracket == CHINA_IIT_BRACKETS[1]
        assert result.tax == Decimal("1080.001")

    @pytest.mark.parametrize("index", range(len(CHINA_IIT_BRACKETS) - 1))
    def test_every_upper_bound_stays_in_its_bracket(self, engine, index):
        bracket = CHINA_IIT_BRACKETS[index]
        result = engine.compute_tax(bracket.upper_bound + Decimal("60000"))
        assert result.bracket == bracket

    def test_top_bracket(self, engine):
        result = engine.compute_tax(Decimal("2000000"))
        assert result.bracket == CHINA_IIT_BRACKETS[-1]
        assert result.tax == Decimal("691080")

    def test_custom_deduction(self, engine):
        result = engine.compute_tax(Decimal("36000"), Decimal("0"))
        assert result.standard_deduction == Decimal("0")
        assert result.tax == Decimal("1080")
        assert result.effective_rate == Decimal("0.03")

    def test_monotonic(self, engine):
        taxes = [engine.compute_tax(i).tax for i in INCOMES]
        assert taxes == sorted(taxes)

    def test_marginal_bracket_rates_non_decreasing(self, engine):
        rates = [engine.compute_tax(i).bracket.rate for i in INCOMES]
        assert rates == sorted(rates)

    @pytest.mark.parametrize("income", INCOMES)
    def test_closed_form_matches_bracket_sum(self, engine, income):
        result = engine.compute_tax(income)
        parts = engine.allocate(result.taxable_income)
        assert sum(p.tax for p in parts) == result.tax

    def test_repeatable(self, engine):
        first = engine.compute_tax(Decimal("777777.77"))
        second = engine.compute_tax(Decimal("777777.77"))
        assert first == second


class TestLocateBracket:
    def test_zero_maps_to_first(self, engine):
        assert engine.locate_bracket(Decimal("0")) == CHINA_IIT_BRACKETS[0]

    def test_inside(self, engine):
        assert engine.locate_bracket(Decimal("200000")) == CHINA_IIT_BRACKETS[2]

    def test_lower_bound_is_exclusive(self, engine):
        assert engine.locate_bracket(Decimal("144000")) == CHINA_IIT_BRACKETS[1]
        assert engine.locate_bracket(Decimal("144000.01")) == CHINA_IIT_BRACKETS[2]

    def test_huge_amount(self, engine):
        assert engine.locate_bracket(Decimal("1E+12")) == CHINA_IIT_BRACKETS[-1]


class TestAllocate:
    def test_empty_for_zero(self, engine):
        assert engine.allocate(Decimal("0")) == []

    def test_within_first_bracket(self, engine):
        parts = engine.allocate(Decimal("20000"))
        assert len(parts) == 1
        assert parts[0].taxable_amount == Decimal("20000")
        assert parts[0].tax == Decimal("600")
        assert parts[0].is_incremental is False

    def test_440k_partition(self, engine):
        parts = engine.allocate(Decimal("440000"))
        assert [p.taxable_amount for p in parts] == [
            Decimal("36000"),
            Decimal("108000"),
            Decimal("156000"),
            Decimal("120000"),
            Decimal("20000"),
        ]
        assert sum(p.tax for p in parts) == Decimal("79080")

    @pytest.mark.parametrize("taxable", [Decimal("1"), Decimal("36000"), Decimal("500000.5"), Decimal("5000000")])
    def test_partition_is_complete(self, engine, taxable):
        parts = engine.allocate(taxable)
        assert sum(p.taxable_amount for p in parts) == taxable
        for part in parts:
            if part.bracket.width is not None:
                assert part.taxable_amount <= part.bracket.width


class TestMarginalRate:
    def test_scenario_options_increment(self, engine):
        rate = engine.compute_marginal_rate(Decimal("500000"), Decimal("288000"))
        expected = (
            engine.compute_tax(Decimal("788000")).tax - engine.compute_tax(Decimal("500000")).tax
        ) / Decimal("288000")
        assert rate == expected
        assert round(rate, 4) == Decimal("0.3118")

    def test_single_bracket_increment(self, engine):
        rate = engine.compute_marginal_rate(Decimal("500000"), Decimal("144000"))
        assert rate == Decimal("0.3")

    def test_increment_under_deduction_is_untaxed(self, engine):
        rate = engine.compute_marginal_rate(Decimal("0"), Decimal("50000"))
        assert rate == Decimal("0")

    def test_zero_increment_is_undefined(self, engine):
        with pytest.raises(InvalidOperation):
            engine.compute_marginal_rate(Decimal("500000"), Decimal("0"))


class TestIncrementalBreakdown:
    def test_scenario_options_breakdown(self, engine):
        breakdown = engine.compute_incremental_breakdown(Decimal("500000"), Decimal("288000"))
        assert breakdown.base_taxable_income == Decimal("440000")
        assert breakdown.new_taxable_income == Decimal("728000")
        assert [(p.bracket.rate, p.taxable_amount, p.tax) for p in breakdown.incremental_attributions] == [
            (Decimal("0.30"), Decimal("220000"), Decimal("66000")),
            (Decimal("0.35"), Decimal("68000"), Decimal("23800")),
        ]
        assert all(p.is_incremental for p in breakdown.incremental_attributions)
        assert breakdown.base_tax == Decimal("79080")
        assert breakdown.incremental_tax == Decimal("89800")
        assert breakdown.total_tax == Decimal("168880")

    def test_ties_back_to_closed_form(self, engine):
        for base in INCOMES:
            for increment in (Decimal("1"), Decimal("45000"), Decimal("288000"), Decimal("1500000.25")):
                breakdown = engine.compute_incremental_breakdown(base, increment)
                closed = (
                    engine.compute_tax(base + increment).tax - engine.compute_tax(base).tax
                )
                assert breakdown.incremental_tax == closed

    def test_incremental_amounts_sum_to_taxable_delta(self, engine):
        breakdown = engine.compute_incremental_breakdown(Decimal("80000"), Decimal("1000000"))
        total = sum(p.taxable_amount for p in breakdown.incremental_attributions)
        assert total == breakdown.new_taxable_income - breakdown.base_taxable_income

    def test_base_below_deduction(self, engine):
        breakdown = engine.compute_incremental_breakdown(Decimal("30000"), Decimal("50000"))
        assert breakdown.base_attributions == []
        assert len(breakdown.incremental_attributions) == 1
        assert breakdown.incremental_attributions[0].taxable_amount == Decimal("20000")
        assert breakdown.incremental_tax == Decimal("600")
        assert breakdown.marginal_rate == Decimal("0.012")

    def test_from_zero_base(self, engine):
        breakdown = engine.compute_incremental_breakdown(Decimal("0"), Decimal("100000"))
        assert breakdown.incremental_tax == Decimal("1480")
        assert breakdown.marginal_rate == Decimal("0.0148")

    def test_zero_increment_rate_is_zero(self, engine):
        breakdown = engine.compute_incremental_breakdown(Decimal("500000"), Decimal("0"))
        assert breakdown.incremental_attributions == []
        assert breakdown.incremental_tax == Decimal("0")
        assert breakdown.marginal_rate == Decimal("0")

    def test_all_zero(self, engine):
        breakdown = engine.compute_incremental_breakdown(Decimal("0"), Decimal("0"))
        assert breakdown.total_tax == Decimal("0")
        assert breakdown.marginal_rate == Decimal("0")

    def test_repeatable(self, engine):
        first = engine.compute_incremental_breakdown(Decimal("654321"), Decimal("123456"))
        second = engine.compute_incremental_breakdown(Decimal("654321"), Decimal("123456"))
        assert first == second


class TestCustomSchedule:
    def test_two_tier_schedule(self):
        engine = ProgressiveTaxEngine(
            brackets=[
                TaxBracket(lower_bound=Decimal("0"), upper_bound=Decimal("100"),
                           rate=Decimal("0.1"), quick_deduction=Decimal("0")),
                TaxBracket(lower_bound=Decimal("100"), upper_bound=None,
                           rate=Decimal("0.2"), quick_deduction=Decimal("10")),
            ],
            standard_deduction=Decimal("0"),
        )
        assert engine.compute_tax(Decimal("200")).tax == Decimal("30")
        assert engine.compute_incremental_breakdown(Decimal("50"), Decimal("100")).incremental_tax == Decimal("15")

    def test_invalid_schedule_rejected(self):
        with pytest.raises(ScheduleError):
            ProgressiveTaxEngine(
                brackets=[
                    TaxBracket(lower_bound=Decimal("0"), upper_bound=Decimal("100"),
                               rate=Decimal("0.1"), quick_deduction=Decimal("0")),
                ]
            )
