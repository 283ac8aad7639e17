"""Deferred bonus projection: vesting tranches and their value at vesting."""

from __future__ import annotations

import datetime as dt
from collections import defaultdict
from dataclasses import dataclass

from ukplan.config.schema import BonusStructure

DAYS_PER_YEAR = 365.25


@dataclass(frozen=True)
class DeferredTranche:
    """One slice of a deferred bonus award."""

    grant_date: dt.date
    vesting_date: dt.date
    amount: float
    growth_rate: float


def vesting_tranches(bonus: BonusStructure, reference_date: dt.date) -> list[DeferredTranche]:
    """Split one year's deferred bonus into equal tranches.

    The award is granted on 1 January of the reference year. Tranche ``k``
    (1-indexed) vests on 1 January of
    ``reference_year + vesting_gap_years + k``.

    Example: £270,000 deferred over 3 years with a 1-year gap, granted in
    2025, vests £90,000 in each of January 2027, 2028 and 2029.
    """
    deferred = bonus.deferred_bonus_annual
    if deferred <= 0 or bonus.vesting_years <= 0:
        return []

    year = reference_date.year
    grant_date = dt.date(year, 1, 1)
    amount = deferred / bonus.vesting_years
    return [
        DeferredTranche(
            grant_date=grant_date,
            vesting_date=dt.date(year + bonus.vesting_gap_years + k, 1, 1),
            amount=amount,
            growth_rate=bonus.estimated_annual_return,
        )
        for k in range(1, bonus.vesting_years + 1)
    ]


def projected_value(tranche: DeferredTranche) -> float:
    """Tranche value at vesting, compounding over 365.25-day years."""
    years = (tranche.vesting_date - tranche.grant_date).days / DAYS_PER_YEAR
    if years <= 0:
        return tranche.amount
    return tranche.amount * (1.0 + tranche.growth_rate) ** years


def total_projected_value(bonus: BonusStructure, reference_date: dt.date) -> float:
    """Sum of projected vesting values for one year's award."""
    return sum(projected_value(t) for t in vesting_tranches(bonus, reference_date))


def vesting_schedule(
    bonus: BonusStructure,
    first_grant_year: int,
    last_grant_year: int,
    bonus_growth_rate: float = 0.0,
    base_year: int | None = None,
) -> dict[int, float]:
    """Projected vesting value per calendar year for a recurring annual award.

    A fresh award is granted each January from ``first_grant_year`` to
    ``last_grant_year`` inclusive, its size growing at ``bonus_growth_rate``
    a year from ``base_year`` (default ``first_grant_year``); awards before
    the base year are scaled down by the same rate. Tranches from
    overlapping awards that vest in the same year are summed.
    """
    if base_year is None:
        base_year = first_grant_year
    schedule: dict[int, float] = defaultdict(float)
    for grant_year in range(first_grant_year, last_grant_year + 1):
        scale = (1.0 + bonus_growth_rate) ** (grant_year - base_year)
        for tranche in vesting_tranches(bonus, dt.date(grant_year, 1, 1)):
            schedule[tranche.vesting_date.year] += projected_value(tranche) * scale
    return dict(schedule)
