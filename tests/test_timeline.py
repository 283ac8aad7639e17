"""Tests for ages, phases and the yearly timeline."""

from __future__ import annotations

import datetime as dt

from ukplan.config.schema import Person
from ukplan.core.timeline import PersonPhase, Timeline, age_on


class TestAgeOn:
    def test_day_before_birthday(self) -> None:
        assert age_on(dt.date(1985, 6, 15), dt.date(2025, 6, 14)) == 39

    def test_on_birthday(self) -> None:
        assert age_on(dt.date(1985, 6, 15), dt.date(2025, 6, 15)) == 40

    def test_leap_day_birthday(self) -> None:
        assert age_on(dt.date(2000, 2, 29), dt.date(2021, 2, 28)) == 20
        assert age_on(dt.date(2000, 2, 29), dt.date(2021, 3, 1)) == 21


class TestPersonPhase:
    def test_flags(self) -> None:
        person = Person(
            id="p1",
            date_of_birth=dt.date(1985, 1, 1),
            planned_retirement_age=60,
            pension_access_age=57,
            state_retirement_age=67,
        )
        assert PersonPhase.at_age(person, 56) == PersonPhase(56, True, False, False)
        assert PersonPhase.at_age(person, 57) == PersonPhase(57, True, True, False)
        assert PersonPhase.at_age(person, 60) == PersonPhase(60, False, True, False)
        assert PersonPhase.at_age(person, 67) == PersonPhase(67, False, True, True)


class TestTimeline:
    def test_from_ages(self) -> None:
        timeline = Timeline.from_ages(40, 95, 2025)
        assert timeline.n_years == 56
        assert timeline.age_at(0) == 40
        assert timeline.year_at(55) == 2080
        assert timeline.offset_for_year(2030) == 5

    def test_end_before_start(self) -> None:
        assert Timeline.from_ages(70, 65, 2025).n_years == 0

    def test_contains_age(self) -> None:
        timeline = Timeline.from_ages(40, 95, 2025)
        assert timeline.contains_age(40)
        assert timeline.contains_age(95)
        assert not timeline.contains_age(39)
        assert not timeline.contains_age(96)
