"""Lifetime cash-flow simulator: the year-by-year household projection."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import asdict, dataclass, field, fields, replace

import numpy as np

from ukplan.config.schema import Household
from ukplan.core.events import CashFlowEvent, EventListBuilder
from ukplan.core.state import PersonState
from ukplan.core.timeline import Timeline
from ukplan.policies.spending import calculate_expenditure
from ukplan.policies.withdrawals import execute_drawdown
from ukplan.taxes.income import take_home_pay_with_student_loan
from ukplan.taxes.rules import TaxRuleTable, resolve_rules
from ukplan.utils.exceptions import SimulationError
from ukplan.utils.money import round_pounds

logger = logging.getLogger(__name__)

DEFAULT_END_AGE = 95


@dataclass(frozen=True)
class LifetimeCashFlowYear:
    """One simulated year, in whole pounds.

    ``total_income`` is the sum of the four income components and
    ``surplus`` is ``total_income - total_expenditure`` (negative for a
    shortfall).
    """

    age: int
    calendar_year: int
    employment_income: float
    pension_income: float
    state_pension_income: float
    investment_income: float
    total_income: float
    total_expenditure: float
    surplus: float


@dataclass
class LifetimeCashFlowResult:
    """Output of a lifetime projection."""

    data: list[LifetimeCashFlowYear] = field(default_factory=list)
    events: list[CashFlowEvent] = field(default_factory=list)
    primary_person_name: str = ""

    def to_arrays(self) -> dict[str, np.ndarray]:
        """Column-wise numpy view of the series, one array per field."""
        return {
            f.name: np.array([getattr(row, f.name) for row in self.data], dtype=float)
            for f in fields(LifetimeCashFlowYear)
        }

    def to_records(self) -> list[dict[str, float]]:
        return [asdict(row) for row in self.data]

    def copy(self) -> LifetimeCashFlowResult:
        """Copy with fresh lists; rows and events are frozen and shared."""
        return replace(self, data=list(self.data), events=list(self.events))


def _employment_income(
    states: list[PersonState],
    offset: int,
    calendar_year: int,
    rules: TaxRuleTable,
) -> float:
    """Net pay of every working person in one year.

    Salary and cash bonus grow at their own rates; deferred awards vesting
    this year are added to the same gross so tax is assessed on the whole.
    """
    total = 0.0
    for state in states:
        if state.income is None or not state.phase(offset).working:
            continue
        income = state.income
        salary = income.gross_salary * (1.0 + (income.salary_growth_rate or 0.0)) ** offset
        cash_bonus = 0.0
        if state.bonus is not None:
            cash_bonus = state.bonus.cash_bonus_annual * (
                1.0 + (income.bonus_growth_rate or 0.0)
            ) ** offset
        gross = salary + cash_bonus + state.vesting.get(calendar_year, 0.0)

        grown = income.model_copy(update={"gross_salary": gross})
        result = take_home_pay_with_student_loan(
            grown, state.person.student_loan_plan, rules=rules
        )
        total += max(0.0, result.take_home)
    return total


def _state_pension_income(states: list[PersonState], offset: int) -> float:
    return sum(
        s.state_pension_annual for s in states if s.phase(offset).state_pension_eligible
    )


def _build_events(
    household: Household,
    states: list[PersonState],
    primary: PersonState,
    timeline: Timeline,
) -> list[CashFlowEvent]:
    builder = EventListBuilder(timeline.start_age, timeline.end_age)
    for state in states:
        person = state.person
        name = person.name or person.id
        age_gap = state.current_age - primary.current_age
        builder.add(person.planned_retirement_age - age_gap, f"{name} retires")
        builder.add(person.pension_access_age - age_gap, f"{name} pension access")
        builder.add(person.state_retirement_age - age_gap, f"{name} state pension")

    for outgoing in household.committed_outgoings:
        if outgoing.end_date is not None:
            age = timeline.age_at(timeline.offset_for_year(outgoing.end_date.year))
            builder.add(age, f"{outgoing.display_label} ends")
    return builder.build()


def generate_lifetime_cash_flow(
    household: Household,
    growth_rate: float,
    end_age: int = DEFAULT_END_AGE,
    *,
    rules: TaxRuleTable | None = None,
    as_of: dt.date | None = None,
) -> LifetimeCashFlowResult:
    """Project the household's cash flow one calendar year at a time.

    Each year, in order: phase flags for every person, net employment
    income, state pension, expenditure, contributions into the pots of
    working people, drawdown to cover any shortfall once anyone is retired,
    and finally growth of what remains in every pot.

    Args:
        household: Validated household snapshot; never mutated.
        growth_rate: Annual growth applied to every pot.
        end_age: Last age of the primary person to simulate, inclusive.
        rules: Tax rule table; the default tax year when omitted.
        as_of: Anchor date for ages and calendar years; today when omitted.

    Returns:
        LifetimeCashFlowResult with one row per year and milestone events.
        An empty household gives an empty result.

    Raises:
        SimulationError: If ``growth_rate`` is -100% or below.
    """
    if growth_rate <= -1.0:
        raise SimulationError(f"growth_rate must be above -100%, got {growth_rate:.2%}")
    if not household.persons:
        return LifetimeCashFlowResult()

    rules = resolve_rules(rules)
    as_of = as_of or dt.date.today()
    primary_person = household.primary_person()
    assert primary_person is not None

    states = [PersonState.initialize(household, p, as_of, rules) for p in household.persons]
    primary = next(s for s in states if s.person.id == primary_person.id)
    timeline = Timeline.from_ages(primary.current_age, end_age, as_of.year)
    events = _build_events(household, states, primary, timeline)

    emergency = household.emergency_fund
    data: list[LifetimeCashFlowYear] = []
    exhausted_logged = False

    for offset in range(timeline.n_years):
        calendar_year = timeline.year_at(offset)

        employment = _employment_income(states, offset, calendar_year, rules)
        state_pension = _state_pension_income(states, offset)
        expenditure = calculate_expenditure(
            household.committed_outgoings,
            emergency.monthly_lifestyle_spending,
            calendar_year,
            base_year=as_of.year,
            lifestyle_inflation_rate=emergency.lifestyle_inflation_rate,
        )

        for state in states:
            if state.phase(offset).working:
                state.apply_contributions()

        investment_drawn = 0.0
        pension_drawn = 0.0
        if any(not s.phase(offset).working for s in states):
            needed = max(0.0, expenditure - employment - state_pension)
            drawdown = execute_drawdown(states, offset, needed)
            investment_drawn = drawdown.investment_drawn
            pension_drawn = drawdown.pension_drawn
            if needed - drawdown.total > 0.5 and not exhausted_logged:
                logger.debug(
                    "Pots cannot cover spending from age %d (short by %.0f)",
                    timeline.age_at(offset),
                    needed - drawdown.total,
                )
                exhausted_logged = True

        for state in states:
            state.grow(growth_rate)

        row_employment = round_pounds(employment)
        row_pension = round_pounds(pension_drawn)
        row_state = round_pounds(state_pension)
        row_investment = round_pounds(investment_drawn)
        total_income = row_employment + row_pension + row_state + row_investment
        total_expenditure = round_pounds(expenditure)
        data.append(
            LifetimeCashFlowYear(
                age=timeline.age_at(offset),
                calendar_year=calendar_year,
                employment_income=row_employment,
                pension_income=row_pension,
                state_pension_income=row_state,
                investment_income=row_investment,
                total_income=total_income,
                total_expenditure=total_expenditure,
                surplus=total_income - total_expenditure,
            )
        )

    logger.debug(
        "Simulated %d years for %d person(s) at %.2f%% growth",
        len(data),
        len(states),
        growth_rate * 100,
    )
    return LifetimeCashFlowResult(
        data=data,
        events=events,
        primary_person_name=primary_person.name,
    )
