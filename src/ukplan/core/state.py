"""Mutable per-person state carried through the yearly simulation loop."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field

from ukplan.config.schema import BonusStructure, Household, Person, PersonIncome
from ukplan.core.timeline import PersonPhase, age_on
from ukplan.policies.contributions import contributions_by_wrapper
from ukplan.policies.deferred import vesting_schedule
from ukplan.taxes.rules import TaxRuleTable
from ukplan.taxes.state_pension import pro_rata_state_pension


@dataclass
class PersonState:
    """Pots and fixed annual flows for one person.

    NOT Pydantic and NOT frozen: pots are mutated every simulated year. The
    household snapshot itself is never touched.

    Attributes:
        person: The household member.
        income: Employment income profile, if any.
        bonus: Bonus structure, if any.
        current_age: Age on the simulation's anchor date.
        pension_pot: Combined workplace pension and SIPP value.
        accessible_wealth: ISA, GIA, cash and premium bond value.
        state_pension_annual: Pro-rata state pension once eligible.
        annual_pension_contribution: Employee + employer + discretionary
            pension contributions while working.
        annual_savings_contribution: ISA and GIA contributions while working.
        vesting: Deferred bonus value vesting per calendar year.
    """

    person: Person
    income: PersonIncome | None
    bonus: BonusStructure | None
    current_age: int
    pension_pot: float
    accessible_wealth: float
    state_pension_annual: float
    annual_pension_contribution: float
    annual_savings_contribution: float
    vesting: dict[int, float] = field(default_factory=dict)

    @classmethod
    def initialize(
        cls,
        household: Household,
        person: Person,
        as_of: dt.date,
        rules: TaxRuleTable,
    ) -> PersonState:
        """Build the starting state for ``person`` from the household snapshot."""
        accounts = household.accounts_for(person.id)
        income = household.income_for(person.id)
        bonus = household.bonus_for(person.id)
        by_wrapper = contributions_by_wrapper(household.contributions_for(person.id))
        current_age = age_on(person.date_of_birth, as_of)

        workplace = 0.0
        if income is not None:
            workplace = income.employee_pension_contribution + income.employer_pension_contribution

        vesting: dict[int, float] = {}
        if bonus is not None and bonus.deferred_bonus_annual > 0:
            # awards granted before the anchor year are already in flight
            last_working_year = as_of.year + person.planned_retirement_age - current_age - 1
            vesting = vesting_schedule(
                bonus,
                first_grant_year=as_of.year - bonus.vesting_gap_years - bonus.vesting_years,
                last_grant_year=last_working_year,
                bonus_growth_rate=(income.bonus_growth_rate or 0.0) if income else 0.0,
                base_year=as_of.year,
            )

        return cls(
            person=person,
            income=income,
            bonus=bonus,
            current_age=current_age,
            pension_pot=sum(a.current_value for a in accounts if a.wrapper == "pension"),
            accessible_wealth=sum(a.current_value for a in accounts if a.wrapper != "pension"),
            state_pension_annual=pro_rata_state_pension(person.ni_qualifying_years, rules=rules),
            annual_pension_contribution=workplace + by_wrapper["pension"],
            annual_savings_contribution=by_wrapper["isa"] + by_wrapper["gia"],
            vesting=vesting,
        )

    def phase(self, offset: int) -> PersonPhase:
        """Phase flags ``offset`` years after the anchor date."""
        return PersonPhase.at_age(self.person, self.current_age + offset)

    def apply_contributions(self) -> None:
        self.pension_pot += self.annual_pension_contribution
        self.accessible_wealth += self.annual_savings_contribution

    def grow(self, growth_rate: float) -> None:
        self.pension_pot = max(0.0, self.pension_pot * (1.0 + growth_rate))
        self.accessible_wealth = max(0.0, self.accessible_wealth * (1.0 + growth_rate))
