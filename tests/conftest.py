"""Shared test fixtures."""

from __future__ import annotations

import datetime as dt

import pytest

from ukplan.config.schema import (
    Account,
    EmergencyFundConfig,
    Household,
    Person,
    PersonIncome,
)
from ukplan.taxes.rules import TaxRuleTable, load_tax_rules


@pytest.fixture
def rules_2024() -> TaxRuleTable:
    return load_tax_rules("2024/25")


@pytest.fixture
def rules_2025() -> TaxRuleTable:
    return load_tax_rules("2025/26")


@pytest.fixture
def as_of() -> dt.date:
    """Fixed anchor date so ages and calendar years are deterministic."""
    return dt.date(2025, 1, 1)


@pytest.fixture
def single_household() -> Household:
    """One earner aged 40 on the anchor date, retiring at 60."""
    return Household(
        persons=[
            Person(
                id="p1",
                name="Alex",
                relationship="self",
                date_of_birth=dt.date(1985, 1, 1),
                planned_retirement_age=60,
                pension_access_age=57,
                state_retirement_age=67,
                ni_qualifying_years=35,
            )
        ],
        income=[
            PersonIncome(person_id="p1", gross_salary=50_000, salary_growth_rate=0.03),
        ],
        accounts=[
            Account(id="a1", person_id="p1", type="sipp", current_value=200_000),
            Account(id="a2", person_id="p1", type="stocks_and_shares_isa", current_value=100_000),
        ],
        emergency_fund=EmergencyFundConfig(monthly_lifestyle_spending=2_000),
    )


@pytest.fixture
def couple() -> Household:
    """Two people, the spouse two years younger."""
    return Household(
        persons=[
            Person(
                id="p1",
                name="Alex",
                relationship="self",
                date_of_birth=dt.date(1985, 1, 1),
                planned_retirement_age=60,
                ni_qualifying_years=35,
            ),
            Person(
                id="p2",
                name="Jamie",
                relationship="spouse",
                date_of_birth=dt.date(1987, 1, 1),
                planned_retirement_age=62,
                ni_qualifying_years=20,
            ),
        ],
        income=[
            PersonIncome(person_id="p1", gross_salary=60_000),
            PersonIncome(person_id="p2", gross_salary=40_000),
        ],
        accounts=[
            Account(id="a1", person_id="p1", type="sipp", current_value=150_000),
            Account(id="a2", person_id="p2", type="workplace_pension", current_value=80_000),
            Account(id="a3", person_id="p2", type="cash_isa", current_value=20_000),
        ],
        emergency_fund=EmergencyFundConfig(monthly_lifestyle_spending=3_000),
    )
