"""Book-value calculation.

Two formulas are in use and the asset's ``depreciation_method`` picks one:

* ``Straight-Line`` spreads the purchase price evenly over the expected
  lifespan, counted in whole months since the purchase date::

      book = price - (price / lifespan_years / 12) * months

* ``Declining Balance`` applies the annual rate to the purchase price for the
  whole months since the asset entered service, truncating to whole Rupiah::

      book = price - trunc(rate / 100 * months / 12 * price)

Values are recomputed on every read and never persisted. Missing numbers count
as zero and missing or unparseable dates count as "no time elapsed", so a
half-filled record still renders instead of failing the whole report.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime
from decimal import ROUND_DOWN, Decimal
from typing import Any, Mapping

from ..core.clock import get_clock
from ..core.currency import ZERO, quantize_currency, to_decimal

STRAIGHT_LINE = "Straight-Line"
DECLINING_BALANCE = "Declining Balance"
DEPRECIATION_METHODS = (STRAIGHT_LINE, DECLINING_BALANCE)
TWELVE = Decimal(12)
HUNDRED = Decimal(100)


def _field(source: Any, name: str, default: Any = None) -> Any:
    if isinstance(source, Mapping):
        return source.get(name, default)
    return getattr(source, name, default)


def parse_date(value: Any) -> date | None:
    """Read a date from a ``date``/``datetime`` or an ISO string; ``None`` if unknown."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip().replace("Z", "+00:00")
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end``, never negative.

    A month counts once the same day-of-month is reached, clamped to the end of
    shorter months (31 Jan -> 28 Feb is one month). Partial months are dropped.
    """

    if end <= start:
        return 0
    months = (end.year - start.year) * 12 + (end.month - start.month)
    anchor_day = min(start.day, calendar.monthrange(end.year, end.month)[1])
    if end.day < anchor_day:
        months -= 1
    return max(months, 0)


def normalize_method(method: Any) -> str:
    """Map free-text method names onto the two supported methods.

    Anything unrecognised is treated as straight-line.
    """

    text = str(method or "").strip().lower().replace("_", "-").replace(" ", "-")
    if text in ("declining-balance", "declining", "rate", "rate-based"):
        return DECLINING_BALANCE
    return STRAIGHT_LINE


def straight_line_value(price: Decimal, lifespan_years: Decimal, months: int) -> Decimal:
    if lifespan_years <= 0 or months <= 0:
        return price
    monthly = price / lifespan_years / TWELVE
    return quantize_currency(price - monthly * Decimal(months))


def declining_balance_value(price: Decimal, rate_percent: Decimal, months: int) -> Decimal:
    if rate_percent <= 0 or months <= 0:
        return price
    # Divide last: an exact product must truncate to itself.
    depreciated = (rate_percent * Decimal(months) * price) / (HUNDRED * TWELVE)
    return price - depreciated.to_integral_value(rounding=ROUND_DOWN)


def compute_book_value(
    asset: Any,
    now: datetime | date | None = None,
    *,
    method: str | None = None,
    floor_at_zero: bool = False,
) -> Decimal:
    """Current book value of ``asset`` (an ORM row, mapping or schema).

    ``now`` defaults to the process clock. ``method`` overrides the asset's own
    ``depreciation_method``; component items, which have no method column, use
    it to force straight-line.
    """

    reference_now = parse_date(now if now is not None else get_clock().now())
    price = to_decimal(_field(asset, "purchase_price"))
    chosen = normalize_method(method or _field(asset, "depreciation_method"))

    if chosen == DECLINING_BALANCE:
        started = parse_date(_field(asset, "active_date"))
        months = months_between(started, reference_now) if started and reference_now else 0
        value = declining_balance_value(price, to_decimal(_field(asset, "depreciation_rate")), months)
    else:
        purchased = parse_date(_field(asset, "purchase_date"))
        months = months_between(purchased, reference_now) if purchased and reference_now else 0
        value = straight_line_value(price, to_decimal(_field(asset, "expected_lifespan")), months)

    if floor_at_zero and value < ZERO:
        return ZERO
    return value


__all__ = [
    "DECLINING_BALANCE",
    "DEPRECIATION_METHODS",
    "STRAIGHT_LINE",
    "compute_book_value",
    "declining_balance_value",
    "months_between",
    "normalize_method",
    "parse_date",
    "straight_line_value",
]
