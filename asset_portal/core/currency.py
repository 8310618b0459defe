"""Rupiah formatting and money coercion helpers.

Arithmetic always happens on ``Decimal`` values; the strings produced here are
for display only and are never parsed back.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

RUPIAH_SYMBOL = "Rp"
ZERO = Decimal("0")
TWOPLACES = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Best-effort conversion of stored or user-entered amounts to ``Decimal``.

    Missing or unparseable values become zero so report computations degrade
    gracefully instead of failing.
    """

    if isinstance(value, Decimal):
        return value
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return ZERO
        cleaned = cleaned.replace(RUPIAH_SYMBOL, "").replace(" ", "")
        try:
            return Decimal(cleaned)
        except InvalidOperation:
            return ZERO
    return ZERO


def quantize_currency(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP) if value else Decimal("0.00")


def format_rupiah(value: Any) -> str:
    """Format an amount like ``Rp 96.000.000`` (zero decimals, dot thousands)."""

    amount = to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    digits = f"{abs(amount):,}".replace(",", ".")
    return f"{sign}{RUPIAH_SYMBOL} {digits}"


__all__ = ["format_rupiah", "quantize_currency", "to_decimal"]
