"""Tests for person-scoped household views."""

from __future__ import annotations

import datetime as dt

from ukplan.config.defaults import couple_household, default_household
from ukplan.config.schema import CommittedOutgoing
from ukplan.config.views import filter_household_by_person


class TestFilterHouseholdByPerson:
    def test_keeps_only_person_records(self) -> None:
        household = couple_household()
        view = filter_household_by_person(household, "p2")
        assert [p.id for p in view.persons] == ["p2"]
        assert [i.person_id for i in view.income] == ["p2"]
        assert view.bonus_structures == []
        assert {a.id for a in view.accounts} == {"a3", "a4"}
        assert [c.id for c in view.contributions] == ["c2"]

    def test_transactions_follow_accounts(self) -> None:
        household = default_household()
        assert len(filter_household_by_person(household, "p1").transactions) == 1
        assert filter_household_by_person(household, "nobody").transactions == []

    def test_outgoings_scoped_by_person(self) -> None:
        household = couple_household().model_copy(
            update={
                "committed_outgoings": [
                    CommittedOutgoing(id="o1", amount=100),
                    CommittedOutgoing(id="o2", amount=200, person_id="p1"),
                    CommittedOutgoing(
                        id="o3", amount=300, person_id="p2", end_date=dt.date(2030, 1, 1)
                    ),
                ]
            }
        )
        view = filter_household_by_person(household, "p1")
        assert [o.id for o in view.committed_outgoings] == ["o1", "o2"]

    def test_shared_settings_kept(self) -> None:
        household = couple_household()
        view = filter_household_by_person(household, "p1")
        assert view.retirement == household.retirement
        assert view.emergency_fund == household.emergency_fund

    def test_unknown_person(self) -> None:
        view = filter_household_by_person(couple_household(), "nobody")
        assert view.persons == []
        assert view.accounts == []

    def test_input_household_untouched(self) -> None:
        household = couple_household()
        filter_household_by_person(household, "p1")
        assert len(household.persons) == 2
        assert len(household.accounts) == 5
