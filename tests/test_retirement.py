"""Tests for retirement sizing and net worth aggregates."""

from __future__ import annotations

import math

import pytest

from ukplan.analytics.net_worth import (
    net_worth_by_account_type,
    net_worth_by_person,
    net_worth_by_wrapper,
    total_net_worth,
)
from ukplan.analytics.retirement import (
    adjusted_required_pot,
    coast_fire,
    household_required_pot,
    household_state_pension,
    household_tax_efficiency,
    mid_scenario_rate,
    pension_bridge,
    project_compound_growth,
    project_compound_growth_with_growing_contributions,
    project_final_value,
    project_salary_trajectory,
    required_monthly_savings,
    required_pot,
    retirement_countdown,
    safe_withdrawal_income,
    savings_rate,
    tax_efficiency_score,
)
from ukplan.config.defaults import couple_household
from ukplan.config.schema import Account, Household, RetirementConfig
from ukplan.taxes.rules import TaxRuleTable
from ukplan.taxes.state_pension import pro_rata_state_pension


class TestRequiredPot:
    def test_four_percent(self) -> None:
        assert required_pot(40_000, 0.04) == 1_000_000
        assert safe_withdrawal_income(1_000_000, 0.04) == 40_000

    def test_zero_rate(self) -> None:
        assert math.isinf(required_pot(40_000, 0.0))

    def test_state_pension_offset(self) -> None:
        assert adjusted_required_pot(60_000, 0.04, True, 11_500) == 1_212_500
        assert adjusted_required_pot(60_000, 0.04, False, 11_500) == 1_500_000

    def test_state_pension_exceeds_target(self) -> None:
        assert adjusted_required_pot(10_000, 0.04, True, 11_500) == 0

    def test_household(self, couple: Household, rules_2024: TaxRuleTable) -> None:
        household = couple.model_copy(
            update={"retirement": RetirementConfig(target_annual_income=40_000)}
        )
        state = household_state_pension(household, rules=rules_2024)
        assert state == pytest.approx(11_502.40 + 11_502.40 * 20 / 35, abs=0.02)
        assert household_required_pot(household, rules=rules_2024) == pytest.approx(
            (40_000 - state) / 0.04, abs=0.01
        )


class TestStatePension:
    def test_full_and_partial(self, rules_2024: TaxRuleTable) -> None:
        assert pro_rata_state_pension(35, rules=rules_2024) == 11_502.40
        assert pro_rata_state_pension(45, rules=rules_2024) == 11_502.40
        assert pro_rata_state_pension(9, rules=rules_2024) == 0
        assert pro_rata_state_pension(10, rules=rules_2024) == pytest.approx(3_286.40)

    def test_later_tax_year(self, rules_2025: TaxRuleTable) -> None:
        assert pro_rata_state_pension(35, rules=rules_2025) == 11_973.00


class TestPensionBridge:
    def test_shortfall(self) -> None:
        bridge = pension_bridge(50, 57, 30_000, 150_000)
        assert bridge.bridge_years == 7
        assert bridge.bridge_pot_required == 210_000
        assert bridge.shortfall == 60_000
        assert not bridge.sufficient

    def test_no_bridge_needed(self) -> None:
        bridge = pension_bridge(60, 57, 30_000, 0)
        assert bridge.bridge_years == 0
        assert bridge.sufficient


class TestMidScenarioRate:
    def test_middle(self) -> None:
        assert mid_scenario_rate([0.05, 0.07, 0.09]) == 0.07
        assert mid_scenario_rate([0.04, 0.06]) == 0.06

    def test_fallback(self) -> None:
        assert mid_scenario_rate([]) == 0.07


class TestCoastAndSavings:
    def test_coast_fire(self) -> None:
        assert coast_fire(100_000, 200_000, 60, 40, 0.05)
        assert not coast_fire(100_000, 300_000, 60, 40, 0.05)
        assert coast_fire(300_000, 200_000, 60, 60, 0.05)

    def test_required_monthly_savings_zero_rate(self) -> None:
        assert required_monthly_savings(120_000, 0, 10, 0.0) == 1_000

    def test_required_monthly_savings_already_there(self) -> None:
        assert required_monthly_savings(100_000, 200_000, 10, 0.05) == 0

    def test_savings_rate_no_income(self) -> None:
        rate = savings_rate(Household())
        assert (rate.total, rate.personal) == (0, 0)

    def test_savings_rate_includes_employer(self) -> None:
        rate = savings_rate(couple_household())
        assert rate.total > rate.personal > 0


class TestNetWorth:
    def test_totals(self) -> None:
        household = couple_household()
        assert total_net_worth(household) == 735_000
        by_person = net_worth_by_person(household)
        assert [(p.person_id, p.value) for p in by_person] == [
            ("p1", 610_000),
            ("p2", 125_000),
        ]

    def test_by_wrapper_and_type(self) -> None:
        household = couple_household()
        assert net_worth_by_wrapper(household) == {
            "pension": 515_000,
            "isa": 170_000,
            "premium_bonds": 50_000,
        }
        assert net_worth_by_account_type(household)["cash_isa"] == 30_000

    def test_empty(self) -> None:
        assert total_net_worth(Household()) == 0
        assert net_worth_by_wrapper(Household()) == {}


class TestProjections:
    def test_flat_without_growth_or_contributions(self) -> None:
        projection = project_compound_growth(100_000, 0, 0.0, 5)
        assert [p.year for p in projection] == [1, 2, 3, 4, 5]
        assert all(p.value == pytest.approx(100_000) for p in projection)

    def test_roughly_doubles_at_seven_percent(self) -> None:
        projection = project_compound_growth(100_000, 0, 0.07, 10)
        assert 190_000 < projection[-1].value < 210_000
        assert all(b.value > a.value for a, b in zip(projection, projection[1:]))

    def test_contributions_add(self) -> None:
        with_saving = project_compound_growth(0, 500, 0.05, 10)
        assert with_saving[-1].value > 60_000
        assert project_compound_growth(0, 0, 0.05, 10)[-1].value == 0

    def test_final_value(self) -> None:
        assert project_final_value(100_000, 1_200, 0.0, 3) == pytest.approx(103_600)
        assert project_final_value(100_000, 1_200, 0.07, 0) == 100_000

    def test_growing_contributions(self) -> None:
        projection = project_compound_growth_with_growing_contributions(0, 1_000, 0.10, 0.0, 3)
        assert [p.value for p in projection] == pytest.approx([1_000, 2_100, 3_310])
        grown = project_compound_growth_with_growing_contributions(1_000, 0, 0.03, 0.10, 2)
        assert [p.value for p in grown] == pytest.approx([1_100, 1_210])

    def test_salary_trajectory(self) -> None:
        trajectory = project_salary_trajectory(30_000, 0.03, 2)
        assert [p.year for p in trajectory] == [0, 1, 2]
        assert [p.value for p in trajectory] == pytest.approx([30_000, 30_900, 31_827])


class TestRetirementCountdown:
    def test_already_there(self) -> None:
        countdown = retirement_countdown(500_000, 10_000, 400_000, 0.05)
        assert (countdown.years, countdown.months) == (0, 0)

    def test_years_and_months(self) -> None:
        countdown = retirement_countdown(0, 12_000, 30_000, 0.0)
        assert (countdown.years, countdown.months) == (2, 6)
        assert countdown.total_months == 30

    def test_more_saving_is_sooner(self) -> None:
        slow = retirement_countdown(50_000, 10_000, 500_000, 0.05)
        fast = retirement_countdown(50_000, 20_000, 500_000, 0.05)
        assert fast.total_months < slow.total_months

    def test_unreachable_capped(self) -> None:
        countdown = retirement_countdown(1_000, 0, 1_000_000, 0.0)
        assert (countdown.years, countdown.months) == (100, 0)


class TestTaxEfficiency:
    def test_score(self) -> None:
        assert tax_efficiency_score(20_000, 60_000, 20_000) == pytest.approx(0.8)
        assert tax_efficiency_score(0, 0, 0) == 0.0

    def test_household_ignores_cash(self) -> None:
        household = Household(
            accounts=[
                Account(id="a1", person_id="p1", type="sipp", current_value=60_000),
                Account(id="a2", person_id="p1", type="cash_isa", current_value=20_000),
                Account(id="a3", person_id="p1", type="gia", current_value=20_000),
                Account(id="a4", person_id="p1", type="cash_savings", current_value=50_000),
            ]
        )
        assert household_tax_efficiency(household) == pytest.approx(0.8)
