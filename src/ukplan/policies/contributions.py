"""Contribution policy: annualised discretionary and workplace contributions."""

from __future__ import annotations

from collections.abc import Iterable

from ukplan.config.schema import Contribution, Household

CONTRIBUTION_MULTIPLIERS: dict[str, int] = {
    "monthly": 12,
    "annually": 1,
}


def annualise_contribution(amount: float, frequency: str) -> float:
    """Convert a per-payment contribution to an annual amount."""
    return amount * CONTRIBUTION_MULTIPLIERS[frequency]


def contributions_by_wrapper(contributions: Iterable[Contribution]) -> dict[str, float]:
    """Annual discretionary contributions keyed by target wrapper.

    Always returns the ``isa``, ``pension`` and ``gia`` keys.
    """
    totals = {"isa": 0.0, "pension": 0.0, "gia": 0.0}
    for c in contributions:
        totals[c.target] += annualise_contribution(c.amount, c.frequency)
    return totals


def workplace_pension_contributions(household: Household, person_id: str) -> tuple[float, float]:
    """Employee and employer pension contributions for a person, (0, 0) if no income."""
    income = household.income_for(person_id)
    if income is None:
        return 0.0, 0.0
    return income.employee_pension_contribution, income.employer_pension_contribution


def total_annual_contributions(household: Household) -> float:
    """All annual contributions: discretionary plus employee and employer pension."""
    discretionary = sum(
        annualise_contribution(c.amount, c.frequency) for c in household.contributions
    )
    workplace = sum(
        i.employee_pension_contribution + i.employer_pension_contribution
        for i in household.income
    )
    return discretionary + workplace


def personal_annual_contributions(household: Household) -> float:
    """Annual contributions made by the household itself (excludes employer pension)."""
    discretionary = sum(
        annualise_contribution(c.amount, c.frequency) for c in household.contributions
    )
    return discretionary + sum(i.employee_pension_contribution for i in household.income)
