"""Rounding helpers for sterling amounts."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

_PENNY = Decimal("0.01")
_POUND = Decimal("1")


def round_pence(value: float) -> float:
    """Round to the nearest penny, halves away from zero."""
    return float(Decimal(repr(value)).quantize(_PENNY, rounding=ROUND_HALF_UP))


def round_pounds(value: float) -> float:
    """Round to the nearest whole pound, halves away from zero."""
    return float(Decimal(repr(value)).quantize(_POUND, rounding=ROUND_HALF_UP))
