"""Archive writes for complementary and component items.

The stored archive is always written as a whole array. A write may carry the
``archive_version`` the client last read; the write then only succeeds if
nobody else wrote in between, otherwise ``ArchiveConflictError`` is raised.
Writes without a version overwrite unconditionally (last write wins).
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping
from uuid import uuid4

from pydantic import ValidationError
from sqlalchemy import update
from sqlalchemy.orm import Session

from ..core.errors import ArchiveConflictError, ItemNotFoundError
from ..models.items import ComplementaryItem, ComponentItem
from ..schemas.archive import ArchiveRecord

logger = logging.getLogger(__name__)

ITEM_MODELS = {
    "complementary": ComplementaryItem,
    "component": ComponentItem,
}


def _model_for(item_type: str):
    try:
        return ITEM_MODELS[item_type]
    except KeyError as exc:
        raise ValueError("type must be 'complementary' or 'component'") from exc


def get_item(db: Session, item_type: str, item_id: str) -> ComplementaryItem | ComponentItem:
    item = db.get(_model_for(item_type), item_id)
    if item is None:
        raise ItemNotFoundError(f"{item_type.capitalize()} item {item_id} not found")
    return item


def normalize_records(records: Iterable[ArchiveRecord | Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Validate records and give each one a stable id if it has none yet.

    Ids must be unique within one archive; a repeated id is rejected.
    """

    normalized = []
    seen: set[str] = set()
    for position, record in enumerate(records):
        try:
            model = record if isinstance(record, ArchiveRecord) else ArchiveRecord.model_validate(record)
        except ValidationError as exc:
            raise ValueError(f"archive record {position} is invalid: {exc.errors()[0]['msg']}") from exc
        data = model.model_dump()
        data["id"] = data.get("id") or uuid4().hex
        if data["id"] in seen:
            raise ValueError(f"archive record {position} repeats id {data['id']}")
        seen.add(data["id"])
        normalized.append(data)
    return normalized


def replace_archive(
    db: Session,
    item_type: str,
    item_id: str,
    records: Iterable[ArchiveRecord | Mapping[str, Any]],
    expected_version: int | None = None,
) -> ComplementaryItem | ComponentItem:
    """Replace an item's whole archive and bump its version.

    An empty list is a valid archive ("no history yet").
    """

    model = _model_for(item_type)
    item = get_item(db, item_type, item_id)
    payload = normalize_records(records)

    if expected_version is None:
        item.archive = payload
        item.archive_version = (item.archive_version or 0) + 1
        db.commit()
    else:
        stmt = (
            update(model)
            .where(model.id == item_id, model.archive_version == expected_version)
            .values(archive=payload, archive_version=expected_version + 1)
            .execution_options(synchronize_session=False)
        )
        result = db.execute(stmt)
        if result.rowcount != 1:
            db.rollback()
            current = get_item(db, item_type, item_id).archive_version or 0
            logger.warning(
                "archive.conflict",
                extra={"extra_data": {"item_id": item_id, "expected": expected_version, "current": current}},
            )
            raise ArchiveConflictError(item_id, expected_version, current)
        db.commit()

    db.refresh(item)
    logger.info(
        "archive.replaced",
        extra={
            "extra_data": {
                "item_type": item_type,
                "item_id": item_id,
                "records": len(payload),
                "version": item.archive_version,
            }
        },
    )
    return item


def _current_records(item) -> list[dict[str, Any]]:
    return [dict(record) for record in (item.archive or [])]


def _index_of(records: list[dict[str, Any]], record_id: str) -> int:
    for index, record in enumerate(records):
        if record.get("id") == record_id:
            return index
    raise ItemNotFoundError(f"Archive record {record_id} not found")


def append_archive_record(
    db: Session,
    item_type: str,
    item_id: str,
    record: ArchiveRecord | Mapping[str, Any],
    expected_version: int | None = None,
):
    item = get_item(db, item_type, item_id)
    records = _current_records(item)
    records.append(dict(record) if isinstance(record, Mapping) else record.model_dump())
    records[-1]["id"] = None
    return replace_archive(db, item_type, item_id, records, expected_version)


def update_archive_record(
    db: Session,
    item_type: str,
    item_id: str,
    record_id: str,
    record: ArchiveRecord | Mapping[str, Any],
    expected_version: int | None = None,
):
    """Edit one record in place; it keeps its id and position."""

    item = get_item(db, item_type, item_id)
    records = _current_records(item)
    index = _index_of(records, record_id)
    replacement = dict(record) if isinstance(record, Mapping) else record.model_dump()
    replacement["id"] = record_id
    records[index] = replacement
    return replace_archive(db, item_type, item_id, records, expected_version)


def remove_archive_record(
    db: Session,
    item_type: str,
    item_id: str,
    record_id: str,
    expected_version: int | None = None,
):
    item = get_item(db, item_type, item_id)
    records = _current_records(item)
    index = _index_of(records, record_id)
    del records[index]
    return replace_archive(db, item_type, item_id, records, expected_version)


__all__ = [
    "ITEM_MODELS",
    "append_archive_record",
    "get_item",
    "normalize_records",
    "remove_archive_record",
    "replace_archive",
    "update_archive_record",
]
