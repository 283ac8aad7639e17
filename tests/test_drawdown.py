"""Tests for retirement drawdown plans and strategy comparison."""

from __future__ import annotations

import pytest

from ukplan.analytics.drawdown import (
    DrawdownPots,
    compare_drawdown_strategies,
    generate_drawdown_plan,
    gia_withdrawal_tax,
)
from ukplan.config.schema import Account, Household
from ukplan.taxes.rules import TaxRuleTable

STANDARD_POTS = DrawdownPots(pension=600_000, isa=200_000, gia=150_000, cash=50_000)


class TestDrawdownPots:
    def test_from_household(self) -> None:
        household = Household(
            accounts=[
                Account(id="a1", person_id="p1", type="sipp", current_value=100_000),
                Account(id="a2", person_id="p1", type="cash_isa", current_value=20_000),
                Account(id="a3", person_id="p1", type="gia", current_value=5_000),
                Account(id="a4", person_id="p1", type="premium_bonds", current_value=1_000),
                Account(id="a5", person_id="p2", type="cash_savings", current_value=2_000),
            ]
        )
        assert DrawdownPots.from_household(household) == DrawdownPots(
            pension=100_000, isa=20_000, gia=5_000, cash=3_000
        )


class TestGiaWithdrawalTax:
    def test_within_exemption(self, rules_2024: TaxRuleTable) -> None:
        assert gia_withdrawal_tax(6_000, rules=rules_2024) == 0.0

    def test_basic_and_higher_rate(self, rules_2024: TaxRuleTable) -> None:
        assert gia_withdrawal_tax(10_000, rules=rules_2024) == pytest.approx(360.0)
        assert gia_withdrawal_tax(10_000, 60_000, rules=rules_2024) == pytest.approx(480.0)


class TestTaxOptimalPlan:
    def test_gia_then_isa_before_pension(self, rules_2024: TaxRuleTable) -> None:
        plan = generate_drawdown_plan(
            STANDARD_POTS, 40_000, 11_500, 67, 60, 70, 0.0, rules=rules_2024
        )
        first = plan.years[0]
        # CGT on 17,000 of gain is made up from the ISA
        assert first.gia_drawn == 40_000
        assert first.tax_paid == 3_060
        assert first.isa_drawn == 3_060
        assert first.pension_drawn == 0
        assert first.net_income == 40_000

    def test_pension_is_last_resort(self, rules_2024: TaxRuleTable) -> None:
        pots = DrawdownPots(pension=800_000, isa=10_000, cash=5_000)
        plan = generate_drawdown_plan(pots, 20_000, 0, 99, 60, 65, 0.0, rules=rules_2024)
        first, second = plan.years[:2]
        assert (first.isa_drawn, first.cash_drawn) == (10_000, 5_000)
        assert first.pension_drawn == pytest.approx(5_000, abs=1)
        assert first.tax_paid == 0
        # gross g satisfies g - 0.2 * (0.75g - 12,570) = 20,000
        assert second.pension_drawn == pytest.approx(20_572, abs=2)
        assert second.tax_paid == pytest.approx(572, abs=2)
        assert second.net_income == pytest.approx(20_000, abs=2)

    def test_state_pension_reduces_withdrawals(self, rules_2024: TaxRuleTable) -> None:
        def total_drawn(state_pension: float) -> float:
            plan = generate_drawdown_plan(
                STANDARD_POTS, 40_000, state_pension, 67, 60, 80, 0.03, rules=rules_2024
            )
            return sum(
                y.pension_drawn + y.isa_drawn + y.gia_drawn + y.cash_drawn for y in plan.years
            )

        assert total_drawn(11_500) < total_drawn(0)

    def test_one_year_per_age(self, rules_2024: TaxRuleTable) -> None:
        plan = generate_drawdown_plan(STANDARD_POTS, 40_000, 11_500, 67, 60, rules=rules_2024)
        assert [y.age for y in plan.years] == list(range(60, 96))
        assert plan.strategy == "tax_optimal"
        assert plan.exhaustion_age is None


class TestPlanBalances:
    def test_exhaustion_age(self, rules_2024: TaxRuleTable) -> None:
        plan = generate_drawdown_plan(
            DrawdownPots(cash=50_000), 20_000, 0, 99, 60, 65, 0.0, rules=rules_2024
        )
        assert plan.exhaustion_age == 62
        assert [y.net_income for y in plan.years] == [20_000, 20_000, 10_000, 0, 0, 0]
        assert plan.years[-1].cash_remaining == 0
        assert plan.total_net_income == 50_000

    def test_cash_does_not_grow(self, rules_2024: TaxRuleTable) -> None:
        plan = generate_drawdown_plan(
            DrawdownPots(isa=10_000, cash=10_000), 0, 0, 99, 60, 60, 0.05, rules=rules_2024
        )
        year = plan.years[0]
        assert year.isa_remaining == 10_500
        assert year.cash_remaining == 10_000

    def test_growth_extends_pot(self, rules_2024: TaxRuleTable) -> None:
        def final_pension(growth: float) -> float:
            plan = generate_drawdown_plan(
                DrawdownPots(pension=300_000), 25_000, 11_500, 67, 60, 95, growth,
                rules=rules_2024,
            )
            return plan.years[-1].pension_remaining + sum(y.pension_drawn for y in plan.years)

        assert final_pension(0.05) > final_pension(0.0)

    def test_unknown_strategy(self, rules_2024: TaxRuleTable) -> None:
        with pytest.raises(ValueError, match="strategy"):
            generate_drawdown_plan(
                STANDARD_POTS, 40_000, 0, 99, 60, 65, strategy="fastest",  # type: ignore[arg-type]
                rules=rules_2024,
            )


class TestProportionalPlan:
    def test_same_share_of_every_pot(self, rules_2024: TaxRuleTable) -> None:
        plan = generate_drawdown_plan(
            STANDARD_POTS, 40_000, 0, 99, 60, 65, 0.0, "proportional", rules=rules_2024
        )
        first = plan.years[0]
        assert (first.pension_drawn, first.isa_drawn, first.gia_drawn, first.cash_drawn) == (
            24_000,
            8_000,
            6_000,
            2_000,
        )
        # 18,000 of the pension draw is taxable; the GIA gain is within the exemption
        assert first.tax_paid == 1_086
        assert first.net_income == 38_914


class TestCompareStrategies:
    def test_strategies_differ(self, rules_2024: TaxRuleTable) -> None:
        comparison = compare_drawdown_strategies(
            STANDARD_POTS, 40_000, 11_500, 67, 60, 85, 0.04, rules=rules_2024
        )
        assert comparison.optimal_tax_paid != comparison.proportional_tax_paid
        assert comparison.tax_saving == (
            comparison.proportional_tax_paid - comparison.optimal_tax_paid
        )
