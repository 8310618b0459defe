"""Lifecycle event persistence (location moves, maintenance and repair work orders)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Union

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..core.errors import AssetNotFoundError, DuplicateAssetError, EventNotFoundError
from ..models.asset import Asset
from ..models.event import DETAIL_MODELS, Event
from ..schemas.event import (
    LocationEventRecord,
    MaintenanceEventRecord,
    RepairEventRecord,
)
from ..services.event_ids import event_type_from_id, generate_event_id

logger = logging.getLogger(__name__)

BASE_FIELDS = (
    "event_id",
    "asset_id",
    "asset_name",
    "event_type",
    "event_date",
    "event_start",
    "event_finish",
    "recorded_by",
    "description",
    "status",
    "created_at",
)
DETAIL_FIELDS = {
    "location": ("location", "checked_out_by", "checked_in_by"),
    "maintenance": (
        "maintenance_type",
        "technician",
        "duration_minutes",
        "downtime_minutes",
        "notes",
        "materials_used",
        "actions",
    ),
    "repair": (
        "failure_description",
        "technician",
        "duration_minutes",
        "downtime_minutes",
        "root_cause",
        "notes",
        "materials_used",
        "actions",
    ),
}
RECORD_SCHEMAS = {
    "location": LocationEventRecord,
    "maintenance": MaintenanceEventRecord,
    "repair": RepairEventRecord,
}

EventRecordModel = Union[LocationEventRecord, MaintenanceEventRecord, RepairEventRecord]


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _detail_values(event_type: str, details: Any) -> dict[str, Any]:
    """Column values for the type-specific row; the stored cost is never taken from input."""

    data = details.model_dump(mode="json", exclude={"cost"})
    return {field: data.get(field) for field in DETAIL_FIELDS[event_type]}


def to_record(event: Event) -> EventRecordModel:
    """Merge the shared row and its type-specific row into the tagged schema."""

    schema = RECORD_SCHEMAS[event.event_type]
    payload: dict[str, Any] = {field: getattr(event, field) for field in BASE_FIELDS}
    detail = getattr(event, event.event_type)
    if detail is not None:
        payload[event.event_type] = {field: getattr(detail, field) for field in DETAIL_FIELDS[event.event_type]}
    return schema.model_validate(payload)


def create_event(db: Session, record: EventRecordModel) -> Event:
    """Insert the shared event row and its type-specific row in one transaction."""

    event_type = record.event_type
    event_id = (record.event_id or "").strip() or generate_event_id(event_type)
    coded_type = event_type_from_id(event_id)
    if coded_type is not None and coded_type != event_type:
        raise ValueError(f"event id {event_id} is not a {event_type} event id")
    asset = db.get(Asset, record.asset_id)
    if asset is None:
        raise AssetNotFoundError(f"Asset {record.asset_id} not found")
    if db.get(Event, event_id) is not None:
        raise DuplicateAssetError(f"Event {event_id} already exists")

    details = getattr(record, event_type)
    try:
        event = Event(
            event_id=event_id,
            asset_id=record.asset_id,
            asset_name=record.asset_name or asset.name,
            event_type=event_type,
            event_date=record.event_date,
            event_start=record.event_start,
            event_finish=record.event_finish,
            recorded_by=record.recorded_by,
            description=record.description,
            status=record.status,
            created_at=_utcnow(),
        )
        setattr(event, event_type, DETAIL_MODELS[event_type](event_id=event_id, **_detail_values(event_type, details)))
        db.add(event)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(event)
    logger.info(
        "event.created",
        extra={"extra_data": {"event_id": event_id, "event_type": event_type, "asset_id": record.asset_id}},
    )
    return event


def get_event(db: Session, event_id: str) -> Event | None:
    return db.get(Event, event_id)


def require_event(db: Session, event_id: str) -> Event:
    event = get_event(db, event_id)
    if event is None:
        raise EventNotFoundError(f"Event {event_id} not found")
    return event


def list_events(db: Session, asset_id: str | None = None, limit: int = 200, offset: int = 0) -> list[Event]:
    stmt = select(Event)
    if asset_id:
        stmt = stmt.where(Event.asset_id == asset_id)
    stmt = stmt.order_by(desc(Event.event_date), desc(Event.created_at)).limit(limit).offset(offset)
    return db.execute(stmt).unique().scalars().all()


def update_event(db: Session, event_id: str, amendment) -> Event:
    """Amend timing/status and replace the type-specific row as a whole."""

    event = require_event(db, event_id)
    if amendment.event_type != event.event_type:
        raise ValueError(f"event {event_id} is a {event.event_type} event, not {amendment.event_type}")

    values = _detail_values(event.event_type, getattr(amendment, event.event_type))
    try:
        event.event_start = amendment.event_start
        event.event_finish = amendment.event_finish
        event.status = amendment.status
        detail = getattr(event, event.event_type)
        if detail is None:
            setattr(event, event.event_type, DETAIL_MODELS[event.event_type](event_id=event_id, **values))
        else:
            for field, value in values.items():
                setattr(detail, field, value)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(event)
    logger.info("event.updated", extra={"extra_data": {"event_id": event_id, "event_type": event.event_type}})
    return event
