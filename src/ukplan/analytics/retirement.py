"""Retirement sizing: withdrawal income, required pots, the pension bridge
and pot growth projections."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from ukplan.config.schema import Household
from ukplan.policies.contributions import (
    personal_annual_contributions,
    total_annual_contributions,
)
from ukplan.taxes.rules import TaxRuleTable, resolve_rules
from ukplan.taxes.state_pension import pro_rata_state_pension
from ukplan.utils.money import round_pence

DEFAULT_MID_RATE = 0.07
MAX_COUNTDOWN_MONTHS = 100 * 12


@dataclass(frozen=True)
class PensionBridgeResult:
    """Whether accessible wealth covers the years before pension access."""

    bridge_years: int
    bridge_pot_required: float
    shortfall: float
    sufficient: bool


@dataclass(frozen=True)
class YearlyProjection:
    """Value at the end of a projection year."""

    year: int
    value: float


@dataclass(frozen=True)
class RetirementCountdown:
    """Time until a pot reaches its target."""

    years: int
    months: int

    @property
    def total_months(self) -> int:
        return self.years * 12 + self.months


@dataclass(frozen=True)
class SavingsRate:
    """Contributions as a percentage of gross household income."""

    total: float
    personal: float


def safe_withdrawal_income(pot: float, rate: float) -> float:
    """Annual income a pot supports at a withdrawal rate."""
    return round_pence(pot * rate)


def required_pot(annual_income: float, rate: float) -> float:
    """Pot needed for ``annual_income`` at a withdrawal rate; inf at rate <= 0."""
    if rate <= 0:
        return math.inf
    return round_pence(annual_income / rate)


def adjusted_required_pot(
    target_annual_income: float,
    withdrawal_rate: float,
    include_state_pension: bool,
    total_state_pension: float,
) -> float:
    """Required pot after the state pension covers part of the target income.

    E.g. a £60,000 target with £11,500 of state pension at 4% needs
    (60,000 - 11,500) / 0.04 = £1,212,500 rather than £1,500,000.
    """
    from_portfolio = target_annual_income
    if include_state_pension:
        from_portfolio = max(0.0, target_annual_income - total_state_pension)
    return required_pot(from_portfolio, withdrawal_rate)


def household_required_pot(
    household: Household,
    *,
    rules: TaxRuleTable | None = None,
) -> float:
    """Required pot using the household's own retirement settings."""
    retirement = household.retirement
    return adjusted_required_pot(
        retirement.target_annual_income,
        retirement.withdrawal_rate,
        retirement.include_state_pension,
        household_state_pension(household, rules=rules),
    )


def household_state_pension(
    household: Household,
    *,
    rules: TaxRuleTable | None = None,
) -> float:
    """Combined annual state pension entitlement of every person."""
    rules = resolve_rules(rules)
    return sum(
        pro_rata_state_pension(p.ni_qualifying_years, rules=rules) for p in household.persons
    )


def pension_bridge(
    retirement_age: int,
    pension_access_age: int,
    annual_spend: float,
    accessible_wealth: float,
) -> PensionBridgeResult:
    """Can non-pension wealth fund spending until pension access?"""
    bridge_years = max(0, pension_access_age - retirement_age)
    pot_required = bridge_years * annual_spend
    return PensionBridgeResult(
        bridge_years=bridge_years,
        bridge_pot_required=round_pence(pot_required),
        shortfall=round_pence(max(0.0, pot_required - accessible_wealth)),
        sufficient=accessible_wealth >= pot_required,
    )


def mid_scenario_rate(rates: Sequence[float], fallback: float = DEFAULT_MID_RATE) -> float:
    """Middle entry of the scenario rates, or ``fallback`` when there are none."""
    if not rates:
        return fallback
    return rates[len(rates) // 2]


def coast_fire(
    current_pot: float,
    target_pot: float,
    target_age: int,
    current_age: int,
    return_rate: float,
) -> bool:
    """True if the current pot grows to the target with no further saving."""
    years = target_age - current_age
    if years <= 0:
        return current_pot >= target_pot
    return current_pot * (1.0 + return_rate) ** years >= target_pot


def required_monthly_savings(
    target_pot: float,
    current_pot: float,
    years: int,
    return_rate: float,
) -> float:
    """Monthly saving needed to reach ``target_pot`` in ``years``.

    Solves the future value of an annuity with monthly compounding.
    """
    if years <= 0:
        return target_pot - current_pot
    monthly_rate = return_rate / 12
    months = years * 12
    remaining = target_pot - current_pot * (1.0 + monthly_rate) ** months
    if remaining <= 0:
        return 0.0
    if abs(monthly_rate) < 1e-10:
        return round_pence(remaining / months)
    annuity_factor = ((1.0 + monthly_rate) ** months - 1.0) / monthly_rate
    return round_pence(remaining / annuity_factor)


def savings_rate(household: Household) -> SavingsRate:
    """Total and personal savings rates in percent of gross income.

    Gross income is salary plus total bonus. Both rates are 0 when there is
    no income.
    """
    gross = sum(i.gross_salary for i in household.income) + sum(
        b.total_bonus_annual for b in household.bonus_structures
    )
    if gross <= 0:
        return SavingsRate(total=0.0, personal=0.0)
    return SavingsRate(
        total=total_annual_contributions(household) / gross * 100,
        personal=personal_annual_contributions(household) / gross * 100,
    )


def project_compound_growth(
    current_value: float,
    monthly_contribution: float,
    annual_rate: float,
    years: int,
) -> list[YearlyProjection]:
    """Year-end values with monthly compounding and monthly contributions."""
    projections = []
    value = current_value
    monthly_rate = annual_rate / 12
    for year in range(1, years + 1):
        for _ in range(12):
            value = value * (1.0 + monthly_rate) + monthly_contribution
        projections.append(YearlyProjection(year=year, value=round_pence(value)))
    return projections


def project_final_value(
    current_value: float,
    annual_contribution: float,
    annual_rate: float,
    years: int,
) -> float:
    """Value after ``years``; ``current_value`` unchanged when years <= 0."""
    if years <= 0:
        return current_value
    monthly = annual_contribution / 12
    projection = project_compound_growth(current_value, monthly, annual_rate, years)
    return projection[-1].value


def project_compound_growth_with_growing_contributions(
    current_value: float,
    annual_contribution: float,
    contribution_growth_rate: float,
    investment_return_rate: float,
    years: int,
) -> list[YearlyProjection]:
    """Year-end values when contributions rise each year, e.g. with salary.

    The pot grows for the year, then that year's contribution is added at
    year end. The contribution grows by ``contribution_growth_rate`` for the
    following year.
    """
    projections = []
    value = current_value
    contribution = annual_contribution
    for year in range(1, years + 1):
        value = value * (1.0 + investment_return_rate) + contribution
        projections.append(YearlyProjection(year=year, value=round_pence(value)))
        contribution *= 1.0 + contribution_growth_rate
    return projections


def project_salary_trajectory(
    salary: float,
    growth_rate: float,
    years: int,
) -> list[YearlyProjection]:
    """Salary in each year from now (year 0) to ``years``."""
    return [
        YearlyProjection(year=year, value=round_pence(salary * (1.0 + growth_rate) ** year))
        for year in range(years + 1)
    ]


def retirement_countdown(
    current_pot: float,
    annual_contribution: float,
    target_pot: float,
    annual_rate: float,
) -> RetirementCountdown:
    """Years and months until the pot reaches ``target_pot``.

    Contributions are spread evenly over the months. The search stops at
    100 years, so an unreachable target reports the cap.
    """
    if current_pot >= target_pot:
        return RetirementCountdown(years=0, months=0)
    monthly_contribution = annual_contribution / 12
    monthly_rate = annual_rate / 12
    value = current_pot
    months = 0
    while value < target_pot and months < MAX_COUNTDOWN_MONTHS:
        value = value * (1.0 + monthly_rate) + monthly_contribution
        months += 1
    return RetirementCountdown(years=months // 12, months=months % 12)


def tax_efficiency_score(isa_value: float, pension_value: float, gia_value: float) -> float:
    """Share of invested wealth held in tax-advantaged wrappers, 0 to 1."""
    total = isa_value + pension_value + gia_value
    if total <= 0:
        return 0.0
    return (isa_value + pension_value) / total


def household_tax_efficiency(household: Household) -> float:
    """Tax efficiency score of the household's ISA, pension and GIA accounts."""
    totals = {"isa": 0.0, "pension": 0.0, "gia": 0.0}
    for account in household.accounts:
        if account.wrapper in totals:
            totals[account.wrapper] += account.current_value
    return tax_efficiency_score(totals["isa"], totals["pension"], totals["gia"])
