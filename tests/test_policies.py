"""Tests for contribution, expenditure and deferred bonus policies."""

from __future__ import annotations

import datetime as dt

import pytest

from ukplan.config.defaults import couple_household
from ukplan.config.schema import BonusStructure, CommittedOutgoing, Contribution
from ukplan.policies.contributions import (
    annualise_contribution,
    contributions_by_wrapper,
    personal_annual_contributions,
    total_annual_contributions,
)
from ukplan.policies.deferred import (
    projected_value,
    total_projected_value,
    vesting_schedule,
    vesting_tranches,
)
from ukplan.policies.spending import (
    annualise_outgoing,
    calculate_expenditure,
    is_outgoing_active,
)


class TestContributions:
    def test_annualise(self) -> None:
        assert annualise_contribution(500, "monthly") == 6_000
        assert annualise_contribution(500, "annually") == 500

    def test_by_wrapper_always_has_keys(self) -> None:
        assert contributions_by_wrapper([]) == {"isa": 0.0, "pension": 0.0, "gia": 0.0}

    def test_by_wrapper(self) -> None:
        contributions = [
            Contribution(person_id="p1", target="isa", amount=1_000),
            Contribution(person_id="p1", target="gia", amount=2_400, frequency="annually"),
            Contribution(person_id="p1", target="isa", amount=100),
        ]
        totals = contributions_by_wrapper(contributions)
        assert totals["isa"] == 13_200
        assert totals["gia"] == 2_400
        assert totals["pension"] == 0

    def test_household_totals(self) -> None:
        household = couple_household()
        # discretionary 20,000 + 6,000 + 2,000; workplace 25,000 + 6,050
        assert total_annual_contributions(household) == pytest.approx(59_050)
        # excludes employer 15,000 + 3,300
        assert personal_annual_contributions(household) == pytest.approx(40_750)


class TestExpenditure:
    @pytest.mark.parametrize("year", [2020, 2025, 2060])
    def test_pure_lifestyle(self, year: int) -> None:
        assert calculate_expenditure([], 2_000, year) == 24_000

    def test_annualise_outgoing(self) -> None:
        assert annualise_outgoing(6_000, "termly") == 18_000
        assert annualise_outgoing(1_000, "monthly") == 12_000
        assert annualise_outgoing(900, "annually") == 900

    def test_date_window(self) -> None:
        outgoing = CommittedOutgoing(
            amount=1_000,
            start_date=dt.date(2026, 9, 1),
            end_date=dt.date(2030, 7, 31),
        )
        assert not is_outgoing_active(outgoing, 2025)
        assert is_outgoing_active(outgoing, 2026)
        assert is_outgoing_active(outgoing, 2030)
        assert not is_outgoing_active(outgoing, 2031)

    def test_outgoing_excluded_outside_window(self) -> None:
        outgoing = CommittedOutgoing(amount=1_000, end_date=dt.date(2030, 12, 31))
        assert calculate_expenditure([outgoing], 0, 2030) == 12_000
        assert calculate_expenditure([outgoing], 0, 2031) == 0

    def test_outgoing_inflation(self) -> None:
        outgoing = CommittedOutgoing(amount=10_000, frequency="annually", inflation_rate=0.05)
        assert calculate_expenditure([outgoing], 0, 2025, base_year=2025) == 10_000
        assert calculate_expenditure([outgoing], 0, 2027, base_year=2025) == pytest.approx(
            11_025
        )

    def test_no_inflation_without_base_year(self) -> None:
        outgoing = CommittedOutgoing(amount=10_000, frequency="annually", inflation_rate=0.05)
        assert calculate_expenditure([outgoing], 0, 2040) == 10_000

    def test_lifestyle_inflation_opt_in(self) -> None:
        assert calculate_expenditure([], 1_000, 2026, base_year=2025) == 12_000
        assert calculate_expenditure(
            [], 1_000, 2026, base_year=2025, lifestyle_inflation_rate=0.1
        ) == pytest.approx(13_200)


class TestDeferredBonus:
    @pytest.fixture
    def bonus(self) -> BonusStructure:
        return BonusStructure(
            person_id="p1",
            total_bonus_annual=370_000,
            cash_bonus_annual=100_000,
            vesting_years=3,
            vesting_gap_years=1,
            estimated_annual_return=0.05,
        )

    def test_deferred_amount(self, bonus: BonusStructure) -> None:
        assert bonus.deferred_bonus_annual == 270_000

    def test_deferred_never_negative(self) -> None:
        bonus = BonusStructure(person_id="p1", total_bonus_annual=10_000, cash_bonus_annual=20_000)
        assert bonus.deferred_bonus_annual == 0
        assert vesting_tranches(bonus, dt.date(2025, 1, 1)) == []

    def test_tranches(self, bonus: BonusStructure) -> None:
        tranches = vesting_tranches(bonus, dt.date(2025, 3, 1))
        assert [t.vesting_date for t in tranches] == [
            dt.date(2027, 1, 1),
            dt.date(2028, 1, 1),
            dt.date(2029, 1, 1),
        ]
        assert all(t.grant_date == dt.date(2025, 1, 1) for t in tranches)
        assert sum(t.amount for t in tranches) == pytest.approx(270_000)

    def test_projected_value_grows(self, bonus: BonusStructure) -> None:
        for tranche in vesting_tranches(bonus, dt.date(2025, 1, 1)):
            assert projected_value(tranche) >= tranche.amount
        assert total_projected_value(bonus, dt.date(2025, 1, 1)) > 270_000

    def test_projected_value_without_growth(self) -> None:
        bonus = BonusStructure(person_id="p1", total_bonus_annual=30_000, vesting_years=3)
        assert total_projected_value(bonus, dt.date(2025, 1, 1)) == pytest.approx(30_000)

    def test_schedule_overlapping_awards(self) -> None:
        bonus = BonusStructure(
            person_id="p1", total_bonus_annual=270_000, vesting_years=3, vesting_gap_years=1
        )
        schedule = vesting_schedule(bonus, 2025, 2026)
        assert schedule == pytest.approx(
            {2027: 90_000, 2028: 180_000, 2029: 180_000, 2030: 90_000}
        )

    def test_schedule_base_year_scaling(self) -> None:
        bonus = BonusStructure(person_id="p1", total_bonus_annual=30_000, vesting_years=1)
        schedule = vesting_schedule(bonus, 2024, 2025, bonus_growth_rate=0.1, base_year=2025)
        assert schedule[2025] == pytest.approx(30_000 / 1.1)
        assert schedule[2026] == pytest.approx(30_000)
