"""Example households and default assumptions for ukplan."""

from __future__ import annotations

import datetime as dt

from ukplan.config.schema import (
    Account,
    BonusStructure,
    CommittedOutgoing,
    Contribution,
    EmergencyFundConfig,
    Holding,
    Household,
    Person,
    PersonIncome,
    RetirementConfig,
    Transaction,
)
from ukplan.taxes.rules import DEFAULT_TAX_YEAR as DEFAULT_TAX_YEAR


def default_household() -> Household:
    """Single higher-rate earner with a pension, an ISA and a small GIA."""
    return Household(
        persons=[
            Person(
                id="p1",
                name="Alex",
                relationship="self",
                date_of_birth=dt.date(1985, 6, 15),
                planned_retirement_age=60,
                pension_access_age=57,
                state_retirement_age=68,
                ni_qualifying_years=16,
                student_loan_plan="plan2",
            )
        ],
        income=[
            PersonIncome(
                person_id="p1",
                gross_salary=85_000,
                employer_pension_contribution=6_000,
                employee_pension_contribution=4_250,
                pension_contribution_method="salary_sacrifice",
                salary_growth_rate=0.03,
            )
        ],
        accounts=[
            Account(
                id="a1",
                person_id="p1",
                type="workplace_pension",
                name="Workplace pension",
                current_value=180_000,
            ),
            Account(
                id="a2",
                person_id="p1",
                type="stocks_and_shares_isa",
                name="ISA",
                current_value=65_000,
            ),
            Account(
                id="a3",
                person_id="p1",
                type="gia",
                name="Dealing account",
                current_value=24_000,
                holdings=[
                    Holding(asset_id="vwrl", units=200, purchase_price=80.0, current_price=120.0)
                ],
            ),
            Account(
                id="a4",
                person_id="p1",
                type="cash_savings",
                name="Easy access",
                current_value=15_000,
            ),
        ],
        transactions=[
            Transaction(
                id="t1",
                account_id="a3",
                asset_id="vwrl",
                type="buy",
                date=dt.date(2019, 3, 1),
                units=200,
                price_per_unit=80.0,
            )
        ],
        contributions=[
            Contribution(
                id="c1",
                person_id="p1",
                label="ISA",
                target="isa",
                amount=1_000,
                frequency="monthly",
            )
        ],
        committed_outgoings=[
            CommittedOutgoing(
                id="o1",
                category="mortgage",
                label="Mortgage",
                amount=1_650,
                frequency="monthly",
                end_date=dt.date(2042, 12, 31),
            )
        ],
        retirement=RetirementConfig(target_annual_income=40_000),
        emergency_fund=EmergencyFundConfig(
            monthly_essential_expenses=2_800,
            target_months=6,
            monthly_lifestyle_spending=1_500,
        ),
    )


def couple_household() -> Household:
    """Two earners with a deferred bonus, school fees and both pension methods."""
    return Household(
        persons=[
            Person(
                id="p1",
                name="Sam",
                relationship="self",
                date_of_birth=dt.date(1980, 3, 2),
                planned_retirement_age=58,
                pension_access_age=57,
                state_retirement_age=67,
                ni_qualifying_years=22,
            ),
            Person(
                id="p2",
                name="Jordan",
                relationship="spouse",
                date_of_birth=dt.date(1982, 9, 20),
                planned_retirement_age=62,
                pension_access_age=57,
                state_retirement_age=67,
                ni_qualifying_years=19,
                student_loan_plan="plan1",
            ),
        ],
        income=[
            PersonIncome(
                person_id="p1",
                gross_salary=150_000,
                employer_pension_contribution=15_000,
                employee_pension_contribution=10_000,
                pension_contribution_method="salary_sacrifice",
                salary_growth_rate=0.02,
                bonus_growth_rate=0.02,
            ),
            PersonIncome(
                person_id="p2",
                gross_salary=55_000,
                employer_pension_contribution=3_300,
                employee_pension_contribution=2_750,
                pension_contribution_method="relief_at_source",
                salary_growth_rate=0.025,
            ),
        ],
        bonus_structures=[
            BonusStructure(
                person_id="p1",
                total_bonus_annual=60_000,
                cash_bonus_annual=30_000,
                vesting_years=3,
                vesting_gap_years=1,
                estimated_annual_return=0.05,
            )
        ],
        accounts=[
            Account(id="a1", person_id="p1", type="sipp", name="SIPP", current_value=420_000),
            Account(
                id="a2",
                person_id="p1",
                type="stocks_and_shares_isa",
                name="ISA",
                current_value=140_000,
            ),
            Account(
                id="a3",
                person_id="p2",
                type="workplace_pension",
                name="Workplace pension",
                current_value=95_000,
            ),
            Account(
                id="a4", person_id="p2", type="cash_isa", name="Cash ISA", current_value=30_000
            ),
            Account(
                id="a5",
                person_id="p1",
                type="premium_bonds",
                name="Premium Bonds",
                current_value=50_000,
            ),
        ],
        contributions=[
            Contribution(
                id="c1",
                person_id="p1",
                label="ISA",
                target="isa",
                amount=20_000,
                frequency="annually",
            ),
            Contribution(
                id="c2", person_id="p2", label="ISA", target="isa", amount=500, frequency="monthly"
            ),
            Contribution(
                id="c3",
                person_id="p1",
                label="SIPP top-up",
                target="pension",
                amount=2_000,
                frequency="annually",
            ),
        ],
        committed_outgoings=[
            CommittedOutgoing(
                id="o1",
                category="school_fees",
                label="School fees",
                amount=6_500,
                frequency="termly",
                end_date=dt.date(2036, 7, 31),
                inflation_rate=0.05,
            ),
            CommittedOutgoing(
                id="o2",
                category="mortgage",
                amount=2_400,
                frequency="monthly",
                end_date=dt.date(2039, 4, 30),
            ),
        ],
        retirement=RetirementConfig(target_annual_income=70_000, withdrawal_rate=0.035),
        emergency_fund=EmergencyFundConfig(
            monthly_essential_expenses=6_000,
            target_months=6,
            monthly_lifestyle_spending=3_500,
        ),
    )


def early_retiree_household() -> Household:
    """Retires at 50 and bridges to pension access from ISA savings."""
    return Household(
        persons=[
            Person(
                id="p1",
                name="Robin",
                relationship="self",
                date_of_birth=dt.date(1978, 11, 5),
                planned_retirement_age=50,
                pension_access_age=57,
                state_retirement_age=67,
                ni_qualifying_years=25,
            )
        ],
        income=[
            PersonIncome(
                person_id="p1",
                gross_salary=70_000,
                employer_pension_contribution=7_000,
                employee_pension_contribution=3_500,
                pension_contribution_method="net_pay",
            )
        ],
        accounts=[
            Account(id="a1", person_id="p1", type="sipp", name="SIPP", current_value=350_000),
            Account(
                id="a2",
                person_id="p1",
                type="stocks_and_shares_isa",
                name="ISA",
                current_value=260_000,
            ),
        ],
        retirement=RetirementConfig(target_annual_income=30_000),
        emergency_fund=EmergencyFundConfig(monthly_lifestyle_spending=2_500),
    )
