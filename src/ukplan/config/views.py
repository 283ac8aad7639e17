"""Person-scoped views of a household snapshot."""

from __future__ import annotations

from ukplan.config.schema import Household


def filter_household_by_person(household: Household, person_id: str) -> Household:
    """Return a copy of ``household`` holding only ``person_id``'s records.

    Accounts and their transactions follow the account owner. Committed
    outgoings are kept when they are unscoped or scoped to this person.
    Retirement and spending assumptions are shared and kept as-is. An
    unknown ``person_id`` yields a household with no persons.
    """
    accounts = household.accounts_for(person_id)
    account_ids = {a.id for a in accounts}
    return household.model_copy(
        update={
            "persons": [p for p in household.persons if p.id == person_id],
            "income": [i for i in household.income if i.person_id == person_id],
            "bonus_structures": [
                b for b in household.bonus_structures if b.person_id == person_id
            ],
            "accounts": accounts,
            "transactions": [t for t in household.transactions if t.account_id in account_ids],
            "contributions": household.contributions_for(person_id),
            "committed_outgoings": [
                o
                for o in household.committed_outgoings
                if o.person_id is None or o.person_id == person_id
            ],
        }
    )
