"""Drawdown ordering policy: accessible wealth -> pension pots."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ukplan.core.state import PersonState


@dataclass(frozen=True)
class DrawdownResult:
    """Amounts drawn in one year."""

    investment_drawn: float
    pension_drawn: float

    @property
    def total(self) -> float:
        return self.investment_drawn + self.pension_drawn


def _draw_proportionally(states: Sequence[PersonState], attr: str, needed: float) -> float:
    """Draw ``needed`` across ``states`` in proportion to each pot, capped at the pot.

    Pots are mutated in place. Returns the amount actually drawn.
    """
    if needed <= 0:
        return 0.0
    available = [(s, getattr(s, attr)) for s in states if getattr(s, attr) > 0]
    total_available = sum(pot for _, pot in available)
    if total_available <= 0:
        return 0.0

    drawn = 0.0
    for state, pot in available:
        draw = min(pot / total_available * needed, pot)
        setattr(state, attr, pot - draw)
        drawn += draw
    return drawn


def execute_drawdown(
    states: Sequence[PersonState],
    offset: int,
    needed: float,
) -> DrawdownResult:
    """Cover a spending shortfall from the household's pots.

    Non-pension wealth (ISA, GIA, cash) is drawn first across every person.
    Whatever remains comes from the pension pots of people who have reached
    their pension access age. Each source is shared in proportion to pot
    size and never drawn below zero, so the result may fall short of
    ``needed``.

    Args:
        states: Per-person state (pots will be mutated).
        offset: Years since the anchor date.
        needed: Shortfall to cover.
    """
    investment = _draw_proportionally(states, "accessible_wealth", needed)
    accessible = [s for s in states if s.phase(offset).pension_accessible]
    pension = _draw_proportionally(accessible, "pension_pot", max(0.0, needed - investment))
    return DrawdownResult(investment_drawn=investment, pension_drawn=pension)
