from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence, TypeVar

UNKNOWN_PO = "UNKNOWN_PO"

RecordT = TypeVar("RecordT")


def purchase_order_key(record: Any) -> str:
    """PO number of ``record`` or ``UNKNOWN_PO`` when it is blank or missing."""

    if isinstance(record, Mapping):
        value = record.get("purchase_order_number")
    else:
        value = getattr(record, "purchase_order_number", None)
    if value is None:
        return UNKNOWN_PO
    text = str(value).strip()
    return text or UNKNOWN_PO


def group_by_purchase_order(records: Iterable[RecordT] | None) -> dict[str, list[RecordT]]:
    """Group archive records by purchase order for display.

    Groups appear in order of first occurrence and keep the records' original
    order. Every record lands in exactly one group.
    """

    grouped: dict[str, list[RecordT]] = {}
    for record in records or ():
        grouped.setdefault(purchase_order_key(record), []).append(record)
    return grouped


def current_record(records: Sequence[RecordT] | None) -> RecordT | None:
    """The item's current state: the last record in list order."""

    if not records:
        return None
    return records[-1]


__all__ = ["UNKNOWN_PO", "current_record", "group_by_purchase_order", "purchase_order_key"]
