"""ISA, pension annual allowance and CGT exemption usage per person.

Every pension figure that is checked against the annual allowance sums all
three sources: employee, employer and discretionary contributions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from ukplan.config.schema import Household
from ukplan.policies.contributions import (
    contributions_by_wrapper,
    workplace_pension_contributions,
)
from ukplan.taxes.income import marginal_rate
from ukplan.taxes.pension_methods import get_pension_method
from ukplan.taxes.rules import TaxRuleTable, resolve_rules

PENSION_HEADROOM_THRESHOLD = 20_000.0
PENSION_HEADROOM_HIGH_PRIORITY = 40_000.0
ISA_HEADROOM_HIGH_PRIORITY = 10_000.0


@dataclass(frozen=True)
class AllowanceUsage:
    """One person's use of their annual allowances."""

    person_id: str
    person_name: str
    adjusted_gross: float
    isa_allowance: float
    isa_contributed: float
    isa_remaining: float
    employee_pension: float
    employer_pension: float
    discretionary_pension: float
    pension_allowance: float
    full_pension_allowance: float
    pension_remaining: float
    gia_contributed: float

    @property
    def total_pension_contributions(self) -> float:
        return self.employee_pension + self.employer_pension + self.discretionary_pension

    @property
    def pension_tapered(self) -> bool:
        return self.pension_allowance < self.full_pension_allowance


@dataclass(frozen=True)
class PensionHeadroom:
    """Unused pension annual allowance worth acting on."""

    person_id: str
    person_name: str
    remaining: float
    allowance: float
    used: float
    percent_used: int
    tapered: bool
    relief_rate: float
    tax_relief: float
    priority: Literal["high", "medium"]


@dataclass(frozen=True)
class IsaHeadroom:
    """Unused ISA allowance for the current tax year."""

    person_id: str
    person_name: str
    remaining: float
    contributed: float
    allowance: float
    percent_used: int
    fully_unused: bool
    priority: Literal["high", "medium"]


def isa_remaining(isa_contributed: float, *, rules: TaxRuleTable | None = None) -> float:
    """ISA allowance left this tax year (negative if over-subscribed)."""
    return resolve_rules(rules).isa_allowance - isa_contributed


def pension_remaining(
    employee_contribution: float,
    employer_contribution: float,
    discretionary_contribution: float,
    allowance: float,
) -> float:
    """Annual allowance left after contributions from every source."""
    return allowance - (employee_contribution + employer_contribution + discretionary_contribution)


def total_pension_contributions(household: Household, person_id: str) -> float:
    """Employee + employer + discretionary pension contributions for a person."""
    employee, employer = workplace_pension_contributions(household, person_id)
    discretionary = contributions_by_wrapper(household.contributions_for(person_id))["pension"]
    return employee + employer + discretionary


def tapered_annual_allowance(
    threshold_income: float,
    adjusted_income: float,
    *,
    rules: TaxRuleTable | None = None,
) -> float:
    """Pension annual allowance after the high-income taper.

    No taper applies while threshold income is at or below its limit, or
    while adjusted income is at or below the taper threshold. Above that,
    £1 of allowance is lost per £2 of excess, down to the minimum.
    """
    pension = resolve_rules(rules).pension
    if threshold_income <= pension.taper_threshold_income:
        return pension.annual_allowance
    if adjusted_income <= pension.taper_adjusted_income_threshold:
        return pension.annual_allowance
    excess = adjusted_income - pension.taper_adjusted_income_threshold
    reduction = int(excess * pension.taper_rate)
    return max(pension.annual_allowance - reduction, pension.minimum_tapered_allowance)


def allowance_usage(
    household: Household,
    person_id: str,
    *,
    rules: TaxRuleTable | None = None,
) -> AllowanceUsage | None:
    """Allowance usage for one person, or None if the person is not in the household."""
    rules = resolve_rules(rules)
    person = next((p for p in household.persons if p.id == person_id), None)
    if person is None:
        return None

    income = household.income_for(person_id)
    bonus = household.bonus_for(person_id)
    by_wrapper = contributions_by_wrapper(household.contributions_for(person_id))
    employee, employer = workplace_pension_contributions(household, person_id)

    gross = (income.gross_salary if income else 0.0) + (
        bonus.total_bonus_annual if bonus else 0.0
    )
    adjusted_gross = gross
    if income is not None:
        handler = get_pension_method(income.pension_contribution_method)
        adjusted_gross = handler.adjusted_gross_for_tax(gross, employee)

    allowance = tapered_annual_allowance(gross, gross + employer, rules=rules)
    return AllowanceUsage(
        person_id=person.id,
        person_name=person.name,
        adjusted_gross=adjusted_gross,
        isa_allowance=rules.isa_allowance,
        isa_contributed=by_wrapper["isa"],
        isa_remaining=isa_remaining(by_wrapper["isa"], rules=rules),
        employee_pension=employee,
        employer_pension=employer,
        discretionary_pension=by_wrapper["pension"],
        pension_allowance=allowance,
        pension_remaining=pension_remaining(employee, employer, by_wrapper["pension"], allowance),
        gia_contributed=by_wrapper["gia"],
        full_pension_allowance=rules.pension.annual_allowance,
    )


def household_allowance_usage(
    household: Household,
    *,
    rules: TaxRuleTable | None = None,
) -> list[AllowanceUsage]:
    """Allowance usage for every person in the household."""
    usages = (allowance_usage(household, p.id, rules=rules) for p in household.persons)
    return [u for u in usages if u is not None]


def analyze_pension_headroom(
    usage: AllowanceUsage,
    *,
    rules: TaxRuleTable | None = None,
    threshold: float = PENSION_HEADROOM_THRESHOLD,
) -> PensionHeadroom | None:
    """Report unused pension allowance above ``threshold``, else None."""
    rules = resolve_rules(rules)
    used = usage.total_pension_contributions
    remaining = usage.pension_remaining
    if remaining <= threshold:
        return None

    # relief at source pays basic rate even below the personal allowance
    relief_rate = max(
        rules.income_tax.basic_rate, marginal_rate(usage.adjusted_gross, rules=rules)
    )
    percent_used = 0
    if usage.pension_allowance > 0:
        percent_used = round(used / usage.pension_allowance * 100)

    return PensionHeadroom(
        person_id=usage.person_id,
        person_name=usage.person_name,
        remaining=remaining,
        allowance=usage.pension_allowance,
        used=used,
        percent_used=percent_used,
        tapered=usage.pension_tapered,
        relief_rate=relief_rate,
        tax_relief=round(remaining * relief_rate),
        priority="high" if remaining > PENSION_HEADROOM_HIGH_PRIORITY else "medium",
    )


def analyze_isa_headroom(usage: AllowanceUsage) -> IsaHeadroom | None:
    """Report any unused ISA allowance, else None."""
    if usage.isa_remaining <= 0:
        return None
    return IsaHeadroom(
        person_id=usage.person_id,
        person_name=usage.person_name,
        remaining=usage.isa_remaining,
        contributed=usage.isa_contributed,
        allowance=usage.isa_allowance,
        percent_used=round(usage.isa_contributed / usage.isa_allowance * 100),
        fully_unused=usage.isa_contributed == 0,
        priority="high" if usage.isa_remaining >= ISA_HEADROOM_HIGH_PRIORITY else "medium",
    )
