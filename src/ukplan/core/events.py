"""Milestone events on the primary person's age axis."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class CashFlowEvent:
    """A labelled milestone at a primary-person age."""

    age: int
    label: str


class EventListBuilder:
    """Accumulate milestone events, then sort and dedupe them once.

    Events outside the ``[start_age, end_age]`` window are dropped on
    append. ``build()`` orders by age, keeps insertion order within an age,
    and removes repeated ``(age, label)`` pairs.
    """

    def __init__(self, start_age: int, end_age: int) -> None:
        self._start_age = start_age
        self._end_age = end_age
        self._events: list[CashFlowEvent] = []

    def add(self, age: int, label: str) -> None:
        if self._start_age <= age <= self._end_age:
            self._events.append(CashFlowEvent(age=age, label=label))

    def __len__(self) -> int:
        return len(self._events)

    def build(self) -> list[CashFlowEvent]:
        seen: set[tuple[int, str]] = set()
        events = []
        for event in sorted(self._events, key=lambda e: e.age):
            key = (event.age, event.label)
            if key in seen:
                continue
            seen.add(key)
            events.append(event)
        return events
