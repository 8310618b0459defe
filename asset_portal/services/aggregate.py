"""Compose an asset row and its related item rows into one nested read-model."""

from __future__ import annotations

import copy
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Mapping

from ..core.config import settings
from ..schemas.asset import AssetAggregate, ComplementaryOut, ComponentOut
from .depreciation import STRAIGHT_LINE, compute_book_value
from .history import current_record

ASSET_FIELDS = tuple(
    name
    for name in AssetAggregate.model_fields
    if name not in ("current_book_value", "complementary_items", "component_items")
)
COMPLEMENTARY_FIELDS = (
    "name",
    "brand",
    "model",
    "category",
    "sub_category",
    "department_owner",
    "expected_lifespan",
    "depreciation_method",
    "depreciation_rate",
    "notes",
    "archive_version",
)
COMPONENT_FIELDS = ("name", "brand", "model", "expected_lifespan", "notes", "archive_version")


def _get(row: Any, name: str, default: Any = None) -> Any:
    if isinstance(row, Mapping):
        value = row.get(name, default)
    else:
        value = getattr(row, name, default)
    return default if value is None else value


def _pick(row: Any, names: Iterable[str]) -> dict[str, Any]:
    picked = {}
    for name in names:
        value = _get(row, name)
        if value is not None:
            picked[name] = value
    return picked


def _archive(row: Any) -> list[dict[str, Any]]:
    # Deep copy so the read-model never aliases the stored JSON value.
    return copy.deepcopy(list(_get(row, "archive", []) or []))


def _item_valuation(
    row: Any,
    archive: list[dict[str, Any]],
    now: datetime | date | None,
    method: str | None,
    floor_at_zero: bool,
) -> tuple[str | None, Decimal]:
    latest = current_record(archive)
    if not isinstance(latest, Mapping):
        return None, Decimal("0")
    basis = {
        "purchase_price": latest.get("purchase_price"),
        "purchase_date": latest.get("purchase_date"),
        "active_date": latest.get("active_date"),
        "expected_lifespan": _get(row, "expected_lifespan", 0),
        "depreciation_method": _get(row, "depreciation_method", ""),
        "depreciation_rate": _get(row, "depreciation_rate", 0),
    }
    value = compute_book_value(basis, now, method=method, floor_at_zero=floor_at_zero)
    return latest.get("status") or None, value


def build_complementary(row: Any, now=None, *, floor_at_zero: bool = False) -> ComplementaryOut:
    archive = _archive(row)
    status, value = _item_valuation(row, archive, now, None, floor_at_zero)
    return ComplementaryOut(
        complementary_id=_get(row, "complementary_id") or _get(row, "id"),
        relation=_get(row, "relation", ""),
        archive=archive,
        current_status=status,
        current_book_value=value,
        **_pick(row, COMPLEMENTARY_FIELDS),
    )


def build_component(row: Any, now=None, *, floor_at_zero: bool = False) -> ComponentOut:
    archive = _archive(row)
    status, value = _item_valuation(row, archive, now, STRAIGHT_LINE, floor_at_zero)
    return ComponentOut(
        component_id=_get(row, "component_id") or _get(row, "id"),
        relation=_get(row, "relation", ""),
        archive=archive,
        current_status=status,
        current_book_value=value,
        **_pick(row, COMPONENT_FIELDS),
    )


def build_asset_aggregate(
    asset_row: Any,
    complementary_rows: Iterable[Any] | None = None,
    component_rows: Iterable[Any] | None = None,
    now: datetime | date | None = None,
    *,
    floor_at_zero: bool | None = None,
) -> AssetAggregate:
    """Nest complementary and component rows under their asset and value it.

    Child order follows the input order. Archive arrays are copied as-is; only
    the relation label and the child identifier are added around them.
    """

    if floor_at_zero is None:
        floor_at_zero = settings.BOOK_VALUE_FLOOR_AT_ZERO
    return AssetAggregate(
        current_book_value=compute_book_value(asset_row, now, floor_at_zero=floor_at_zero),
        complementary_items=[
            build_complementary(row, now, floor_at_zero=floor_at_zero) for row in complementary_rows or ()
        ],
        component_items=[
            build_component(row, now, floor_at_zero=floor_at_zero) for row in component_rows or ()
        ],
        **_pick(asset_row, ASSET_FIELDS),
    )


__all__ = ["build_asset_aggregate", "build_complementary", "build_component"]
