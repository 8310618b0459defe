"""Report payloads handed to the print/PDF renderer.

The renderer receives plain JSON: raw values for anything it may compute on,
``*_display`` strings for money, and every item's archive grouped by PO.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping

from ..core.clock import get_clock
from ..core.currency import format_rupiah
from ..schemas.asset import AssetAggregate
from .history import group_by_purchase_order

CATALOG_BLANK_KEY = "#"


def _format_rate(rate: Any) -> str:
    value = float(rate or 0)
    return f"{value:g}%"


def _record_row(record: Mapping[str, Any]) -> dict[str, Any]:
    row = dict(record)
    row["purchase_price_display"] = format_rupiah(record.get("purchase_price"))
    return row


def _history(archive: list[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    grouped = group_by_purchase_order(archive)
    return {po: [_record_row(record) for record in records] for po, records in grouped.items()}


def build_asset_report(aggregate: AssetAggregate, generated_at: datetime | None = None) -> dict[str, Any]:
    """Flatten an aggregate into the report document for one asset."""

    asset = aggregate.model_dump(mode="json", exclude={"complementary_items", "component_items"})
    asset["purchase_price_display"] = format_rupiah(aggregate.purchase_price)
    asset["current_book_value_display"] = format_rupiah(aggregate.current_book_value)
    asset["depreciation_rate_display"] = _format_rate(aggregate.depreciation_rate)

    complementary = []
    for item in aggregate.complementary_items:
        row = item.model_dump(mode="json", exclude={"archive"})
        row["current_book_value_display"] = format_rupiah(item.current_book_value)
        row["history"] = _history(item.archive)
        complementary.append(row)

    components = []
    for item in aggregate.component_items:
        row = item.model_dump(mode="json", exclude={"archive"})
        row["current_book_value_display"] = format_rupiah(item.current_book_value)
        row["history"] = _history(item.archive)
        components.append(row)

    stamp = generated_at or get_clock().now()
    return {
        "asset": asset,
        "complementary_items": complementary,
        "component_items": components,
        "complementary_count": len(complementary),
        "component_count": len(components),
        "generated_at": stamp.isoformat(timespec="seconds"),
    }


def _name_of(asset: Any) -> str:
    if isinstance(asset, Mapping):
        return str(asset.get("name") or "")
    return str(getattr(asset, "name", "") or "")


def group_catalog_by_initial(assets: Iterable[Any]) -> dict[str, list[Any]]:
    """Catalog index: assets bucketed by the first letter of their name, keys sorted."""

    buckets: dict[str, list[Any]] = {}
    for asset in assets:
        name = _name_of(asset).strip()
        key = name[0].upper() if name else CATALOG_BLANK_KEY
        buckets.setdefault(key, []).append(asset)
    return {key: buckets[key] for key in sorted(buckets)}


__all__ = ["build_asset_report", "group_catalog_by_initial"]
