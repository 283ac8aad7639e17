"""Net worth aggregates over the household's accounts."""

from __future__ import annotations

from dataclasses import dataclass

from ukplan.config.schema import Household
from ukplan.utils.money import round_pence


@dataclass(frozen=True)
class PersonNetWorth:
    person_id: str
    name: str
    value: float


def total_net_worth(household: Household) -> float:
    return round_pence(sum(a.current_value for a in household.accounts))


def net_worth_by_person(household: Household) -> list[PersonNetWorth]:
    """Account value per person, in household order."""
    return [
        PersonNetWorth(
            person_id=p.id,
            name=p.name,
            value=round_pence(sum(a.current_value for a in household.accounts_for(p.id))),
        )
        for p in household.persons
    ]


def net_worth_by_wrapper(household: Household) -> dict[str, float]:
    """Account value per tax wrapper, for wrappers the household holds."""
    totals: dict[str, float] = {}
    for account in household.accounts:
        totals[account.wrapper] = totals.get(account.wrapper, 0.0) + account.current_value
    return {wrapper: round_pence(value) for wrapper, value in totals.items()}


def net_worth_by_account_type(household: Household) -> dict[str, float]:
    totals: dict[str, float] = {}
    for account in household.accounts:
        totals[account.type] = totals.get(account.type, 0.0) + account.current_value
    return {account_type: round_pence(value) for account_type, value in totals.items()}
