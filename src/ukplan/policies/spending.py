"""Expenditure policy: committed outgoings and lifestyle spending per calendar year."""

from __future__ import annotations

from collections.abc import Iterable

from ukplan.config.schema import CommittedOutgoing

OUTGOING_MULTIPLIERS: dict[str, int] = {
    "monthly": 12,
    "termly": 3,
    "annually": 1,
}


def annualise_outgoing(amount: float, frequency: str) -> float:
    """Convert a per-occurrence outgoing to an annual amount."""
    return amount * OUTGOING_MULTIPLIERS[frequency]


def is_outgoing_active(outgoing: CommittedOutgoing, calendar_year: int) -> bool:
    """True if ``calendar_year`` falls inside the outgoing's optional date window."""
    if outgoing.start_date is not None and calendar_year < outgoing.start_date.year:
        return False
    if outgoing.end_date is not None and calendar_year > outgoing.end_date.year:
        return False
    return True


def _inflation_factor(rate: float | None, calendar_year: int, base_year: int | None) -> float:
    if not rate or base_year is None or calendar_year <= base_year:
        return 1.0
    return (1.0 + rate) ** (calendar_year - base_year)


def calculate_expenditure(
    outgoings: Iterable[CommittedOutgoing],
    monthly_lifestyle_spending: float,
    calendar_year: int,
    base_year: int | None = None,
    lifestyle_inflation_rate: float | None = None,
) -> float:
    """Total household spending for one calendar year.

    Each active outgoing is annualised and compounded by its own inflation
    rate from ``base_year``. Lifestyle spending is annualised and left
    uninflated unless ``lifestyle_inflation_rate`` is given.

    Args:
        outgoings: Committed outgoings.
        monthly_lifestyle_spending: Discretionary monthly spend.
        calendar_year: Year being costed.
        base_year: Year in which amounts are stated; no inflation when None.
        lifestyle_inflation_rate: Optional annual inflation on lifestyle spend.
    """
    total = 0.0
    for outgoing in outgoings:
        if not is_outgoing_active(outgoing, calendar_year):
            continue
        annual = annualise_outgoing(outgoing.amount, outgoing.frequency)
        total += annual * _inflation_factor(outgoing.inflation_rate, calendar_year, base_year)

    lifestyle = monthly_lifestyle_spending * 12
    total += lifestyle * _inflation_factor(lifestyle_inflation_rate, calendar_year, base_year)
    return total
