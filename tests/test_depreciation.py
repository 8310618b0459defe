import os
import sys
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from asset_portal.core.clock import Clock, FixedClock, set_clock
from asset_portal.services.depreciation import (
    DECLINING_BALANCE,
    STRAIGHT_LINE,
    compute_book_value,
    months_between,
    normalize_method,
    parse_date,
)


def _laptop(**overrides):
    asset = {
        "purchase_price": 120_000_000,
        "expected_lifespan": 5,
        "depreciation_method": "Straight-Line",
        "depreciation_rate": 0,
        "purchase_date": "2023-01-01",
        "active_date": "2023-01-01",
    }
    asset.update(overrides)
    return asset


def test_straight_line_one_year_in():
    value = compute_book_value(_laptop(), date(2024, 1, 1))
    assert value == Decimal("96000000")


def test_straight_line_at_purchase_date_is_full_price():
    assert compute_book_value(_laptop(), date(2023, 1, 1)) == Decimal("120000000")


def test_declining_balance_at_active_date_is_full_price():
    asset = _laptop(depreciation_method="Declining Balance", depreciation_rate=25, active_date="2023-03-15")
    assert compute_book_value(asset, date(2023, 3, 15)) == Decimal("120000000")


def test_declining_balance_uses_active_date_and_rate():
    asset = _laptop(
        depreciation_method="Declining Balance",
        depreciation_rate=25,
        purchase_date="2020-01-01",
        active_date="2023-01-01",
    )
    # 25% a year for 6 months of service.
    assert compute_book_value(asset, date(2023, 7, 1)) == Decimal("105000000")


def test_declining_balance_truncates_fraction():
    asset = _laptop(purchase_price=1000, depreciation_method="Declining Balance", depreciation_rate=10)
    # 10% * 1/12 * 1000 = 8.33.. -> 8
    assert compute_book_value(asset, date(2023, 2, 1)) == Decimal("992")


def test_book_value_never_increases_over_time():
    for method, extra in ((STRAIGHT_LINE, {}), (DECLINING_BALANCE, {"depreciation_rate": 20})):
        asset = _laptop(depreciation_method=method, **extra)
        previous = None
        for months in range(0, 90, 3):
            now = date(2023 + months // 12, months % 12 + 1, 1)
            value = compute_book_value(asset, now)
            if previous is not None:
                assert value <= previous
            previous = value


def test_overrun_goes_negative_unless_floored():
    asset = _laptop(expected_lifespan=1)
    assert compute_book_value(asset, date(2025, 1, 1)) == Decimal("-120000000")
    assert compute_book_value(asset, date(2025, 1, 1), floor_at_zero=True) == Decimal("0")


def test_missing_inputs_do_not_raise():
    assert compute_book_value({}, date(2024, 1, 1)) == Decimal("0")
    assert compute_book_value(_laptop(purchase_date=None), date(2024, 1, 1)) == Decimal("120000000")
    assert compute_book_value(_laptop(expected_lifespan=0), date(2024, 1, 1)) == Decimal("120000000")
    assert compute_book_value(_laptop(purchase_date="not a date"), date(2024, 1, 1)) == Decimal("120000000")


def test_now_before_purchase_counts_as_no_time():
    assert compute_book_value(_laptop(), date(2022, 6, 1)) == Decimal("120000000")


def test_method_override_forces_straight_line():
    asset = _laptop(depreciation_method="Declining Balance", depreciation_rate=50)
    assert compute_book_value(asset, date(2024, 1, 1), method=STRAIGHT_LINE) == Decimal("96000000")


def test_months_between_clamps_to_month_end():
    assert months_between(date(2023, 1, 31), date(2023, 2, 28)) == 1
    assert months_between(date(2023, 1, 15), date(2023, 2, 14)) == 0
    assert months_between(date(2023, 1, 15), date(2024, 1, 15)) == 12
    assert months_between(date(2024, 1, 1), date(2023, 1, 1)) == 0


def test_normalize_method_defaults_to_straight_line():
    assert normalize_method("declining balance") == DECLINING_BALANCE
    assert normalize_method("Declining_Balance") == DECLINING_BALANCE
    assert normalize_method("") == STRAIGHT_LINE
    assert normalize_method("sum of years") == STRAIGHT_LINE


def test_parse_date_accepts_timestamps():
    assert parse_date("2023-05-06T10:00:00Z") == date(2023, 5, 6)
    assert parse_date(datetime(2023, 5, 6, 23, 0)) == date(2023, 5, 6)
    assert parse_date("  ") is None


def test_default_now_comes_from_clock():
    previous = set_clock(FixedClock(datetime(2024, 1, 1, 9, 0)))
    try:
        assert compute_book_value(_laptop()) == Decimal("96000000")
    finally:
        set_clock(previous)


def test_declining_balance_exact_products_are_not_truncated_short():
    def at(price, rate, months):
        asset = _laptop(
            purchase_price=price,
            depreciation_method="Declining Balance",
            depreciation_rate=rate,
            active_date="2023-01-01",
        )
        return compute_book_value(asset, date(2023 + months // 12, months % 12 + 1, 1))

    assert at(1_000_000, 30, 4) == Decimal("900000")
    assert at(100, 30, 4) == Decimal("90")
    assert at(120_000_000, 20, 18) == Decimal("84000000")
    # 7% of 1,000 over 5 months is 29.1666..; only the fraction is dropped.
    assert at(1_000, 7, 5) == Decimal("971")


def test_clock_base_is_abstract():
    with pytest.raises(TypeError):
        Clock()
