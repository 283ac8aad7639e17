"""Yearly timeline and per-person life phases."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

from ukplan.config.schema import Person


def age_on(date_of_birth: dt.date, as_of: dt.date) -> int:
    """Whole years of age on ``as_of``."""
    age = as_of.year - date_of_birth.year
    if (as_of.month, as_of.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


@dataclass(frozen=True, slots=True)
class PersonPhase:
    """Phase flags for one person in one simulated year.

    Attributes:
        age: Age reached during the year.
        working: Still before the planned retirement age.
        pension_accessible: At or past the pension access age.
        state_pension_eligible: At or past the state retirement age.
    """

    age: int
    working: bool
    pension_accessible: bool
    state_pension_eligible: bool

    @classmethod
    def at_age(cls, person: Person, age: int) -> PersonPhase:
        return cls(
            age=age,
            working=age < person.planned_retirement_age,
            pension_accessible=age >= person.pension_access_age,
            state_pension_eligible=age >= person.state_retirement_age,
        )


@dataclass(frozen=True, slots=True)
class Timeline:
    """Annual time grid anchored on the primary person's age.

    Attributes:
        start_age: Primary person's age in the first simulated year.
        end_age: Last simulated age, inclusive.
        start_year: Calendar year of the first simulated year.
        n_years: Number of simulated years (0 if ``end_age < start_age``).
    """

    start_age: int
    end_age: int
    start_year: int
    n_years: int

    @classmethod
    def from_ages(cls, start_age: int, end_age: int, start_year: int) -> Timeline:
        """Create a Timeline from the primary person's current and end ages."""
        return cls(
            start_age=start_age,
            end_age=end_age,
            start_year=start_year,
            n_years=max(0, end_age - start_age + 1),
        )

    def age_at(self, offset: int) -> int:
        """Primary person's age ``offset`` years in."""
        return self.start_age + offset

    def year_at(self, offset: int) -> int:
        """Calendar year ``offset`` years in."""
        return self.start_year + offset

    def offset_for_year(self, calendar_year: int) -> int:
        return calendar_year - self.start_year

    def contains_age(self, age: int) -> bool:
        return self.start_age <= age <= self.end_age
