"""Asset catalog persistence: creation bundles, child attachment, state updates and reads."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Iterable
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import FlushError

from ..core.errors import AssetNotFoundError, DuplicateAssetError
from ..models.asset import Asset
from ..models.items import ComplementaryItem, ComplementaryRelation, ComponentItem, ComponentRelation
from ..schemas.asset import AssetAggregate
from ..services.aggregate import build_asset_aggregate

logger = logging.getLogger(__name__)

ARCHIVE_FIELDS = (
    "serial_number",
    "part_number",
    "purchase_price",
    "purchase_order_number",
    "purchase_date",
    "supplier_vendor",
    "warranty",
    "status",
    "active_date",
)
ASSET_COLUMNS = tuple(column.name for column in Asset.__table__.columns if column.name not in ("image_url", "created_at"))
COMPLEMENTARY_COLUMNS = (
    "id",
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
)
COMPONENT_COLUMNS = ("id", "name", "brand", "model", "expected_lifespan", "notes")


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _slug(value: str | None) -> str:
    return re.sub(r"[ /]", "_", (value or "").lower())


def image_url_for(asset_id: str, category: str | None, sub_category: str | None) -> str:
    """Path of the asset photo in the image store: ``/<category>/<sub_category>/<id>.jpg``."""

    return f"/{_slug(category)}/{_slug(sub_category)}/{asset_id}.jpg"


def first_archive_record(payload: dict[str, Any]) -> dict[str, Any]:
    """Build the initial archive entry from the flat purchase fields of a creation form."""

    record = {field: payload.get(field) for field in ARCHIVE_FIELDS}
    for field in ARCHIVE_FIELDS:
        if record[field] is None:
            record[field] = 0 if field == "purchase_price" else ""
    record["status"] = record["status"] or "Active"
    record["notes"] = payload.get("purchase_notes") or ""
    record["id"] = uuid4().hex
    return record


def _new_complementary(payload: dict[str, Any]) -> ComplementaryItem:
    data = {key: payload[key] for key in COMPLEMENTARY_COLUMNS if payload.get(key) is not None}
    return ComplementaryItem(archive=[first_archive_record(payload)], archive_version=1, **data)


def _new_component(payload: dict[str, Any]) -> ComponentItem:
    data = {key: payload[key] for key in COMPONENT_COLUMNS if payload.get(key) is not None}
    return ComponentItem(archive=[first_archive_record(payload)], archive_version=1, **data)


def _flush_or_conflict(db: Session, what: str) -> None:
    try:
        db.flush()
    except (IntegrityError, FlushError) as exc:
        raise DuplicateAssetError(f"{what} already exists") from exc


def create_asset_bundle(
    db: Session,
    asset: dict[str, Any],
    complementary: Iterable[dict[str, Any]] = (),
    components: Iterable[dict[str, Any]] = (),
) -> Asset:
    """Insert an asset with its first complementary and component items atomically.

    Either every row lands or none does. Ids are caller-assigned, so
    resubmitting the same bundle fails with ``DuplicateAssetError``.
    """

    complementary = list(complementary)
    components = list(components)
    try:
        if db.get(Asset, asset["id"]) is not None:
            raise DuplicateAssetError(f"Asset {asset['id']} already exists")
        data = {key: asset[key] for key in ASSET_COLUMNS if asset.get(key) is not None}
        row = Asset(
            image_url=image_url_for(asset["id"], asset.get("category"), asset.get("sub_category")),
            created_at=_utcnow(),
            **data,
        )
        db.add(row)
        _flush_or_conflict(db, f"Asset {asset['id']}")

        for payload in complementary:
            db.add(_new_complementary(payload))
            _flush_or_conflict(db, f"Complementary item {payload['id']}")
            db.add(
                ComplementaryRelation(
                    parent_id=row.id,
                    complementary_id=payload["id"],
                    relation=payload.get("relation") or "",
                )
            )

        for payload in components:
            db.add(_new_component(payload))
            _flush_or_conflict(db, f"Component item {payload['id']}")
            db.add(
                ComponentRelation(
                    parent_id=row.id,
                    component_id=payload["id"],
                    relation=payload.get("relation") or "",
                )
            )

        db.commit()
    except Exception:
        db.rollback()
        logger.warning("asset.create_failed", extra={"extra_data": {"asset_id": asset.get("id")}})
        raise

    db.refresh(row)
    logger.info(
        "asset.created",
        extra={
            "extra_data": {
                "asset_id": row.id,
                "complementary": len(complementary),
                "components": len(components),
            }
        },
    )
    return row


def get_asset(db: Session, asset_id: str) -> Asset | None:
    return db.get(Asset, asset_id)


def require_asset(db: Session, asset_id: str) -> Asset:
    asset = get_asset(db, asset_id)
    if asset is None:
        raise AssetNotFoundError(f"Asset {asset_id} not found")
    return asset


def list_assets(db: Session, limit: int = 500, offset: int = 0) -> list[Asset]:
    stmt = select(Asset).order_by(Asset.name, Asset.id).limit(limit).offset(offset)
    return db.execute(stmt).scalars().all()


def add_complementary(db: Session, asset_id: str, payload: dict[str, Any]) -> ComplementaryItem:
    """Attach one new complementary item to an existing asset."""

    require_asset(db, asset_id)
    try:
        item = _new_complementary(payload)
        db.add(item)
        _flush_or_conflict(db, f"Complementary item {payload['id']}")
        db.add(
            ComplementaryRelation(
                parent_id=asset_id,
                complementary_id=item.id,
                relation=payload.get("relation") or "",
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(item)
    logger.info("asset.complementary_added", extra={"extra_data": {"asset_id": asset_id, "item_id": item.id}})
    return item


def add_component(db: Session, asset_id: str, payload: dict[str, Any]) -> ComponentItem:
    """Attach one new component item to an existing asset."""

    require_asset(db, asset_id)
    try:
        item = _new_component(payload)
        db.add(item)
        _flush_or_conflict(db, f"Component item {payload['id']}")
        db.add(
            ComponentRelation(
                parent_id=asset_id,
                component_id=item.id,
                relation=payload.get("relation") or "",
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(item)
    logger.info("asset.component_added", extra={"extra_data": {"asset_id": asset_id, "item_id": item.id}})
    return item


def update_asset_state(
    db: Session,
    asset_id: str,
    *,
    status: str,
    active_date: str,
    notes: str | None = None,
    primary_user: str | None = None,
) -> Asset:
    """Update status, service date and notes; the only change allowed after creation."""

    if status not in ("Active", "Inactive"):
        raise ValueError("status must be Active or Inactive")
    if not (active_date or "").strip():
        raise ValueError("active_date is required")
    asset = require_asset(db, asset_id)
    asset.status = status
    asset.active_date = active_date.strip()
    asset.notes = notes or ""
    if primary_user is not None:
        asset.primary_user = primary_user
    db.commit()
    db.refresh(asset)
    logger.info("asset.state_updated", extra={"extra_data": {"asset_id": asset_id, "status": status}})
    return asset


def list_complementary_rows(db: Session, asset_id: str) -> list[dict[str, Any]]:
    """Complementary items of an asset joined with their relation labels, in attachment order."""

    stmt = (
        select(ComplementaryItem, ComplementaryRelation.relation)
        .join(ComplementaryRelation, ComplementaryRelation.complementary_id == ComplementaryItem.id)
        .where(ComplementaryRelation.parent_id == asset_id)
        .order_by(ComplementaryRelation.id)
    )
    rows = []
    for item, relation in db.execute(stmt).all():
        row = {column: getattr(item, column) for column in COMPLEMENTARY_COLUMNS}
        row.update(
            complementary_id=item.id,
            relation=relation or "",
            archive=item.archive or [],
            archive_version=item.archive_version or 0,
        )
        rows.append(row)
    return rows


def list_component_rows(db: Session, asset_id: str) -> list[dict[str, Any]]:
    """Component items of an asset joined with their relation labels, in attachment order."""

    stmt = (
        select(ComponentItem, ComponentRelation.relation)
        .join(ComponentRelation, ComponentRelation.component_id == ComponentItem.id)
        .where(ComponentRelation.parent_id == asset_id)
        .order_by(ComponentRelation.id)
    )
    rows = []
    for item, relation in db.execute(stmt).all():
        row = {column: getattr(item, column) for column in COMPONENT_COLUMNS}
        row.update(
            component_id=item.id,
            relation=relation or "",
            archive=item.archive or [],
            archive_version=item.archive_version or 0,
        )
        rows.append(row)
    return rows


def get_asset_aggregate(db: Session, asset_id: str, now=None) -> AssetAggregate:
    asset = require_asset(db, asset_id)
    return build_asset_aggregate(
        asset,
        list_complementary_rows(db, asset_id),
        list_component_rows(db, asset_id),
        now,
    )


def list_asset_aggregates(db: Session, now=None, limit: int = 500, offset: int = 0) -> list[AssetAggregate]:
    return [
        build_asset_aggregate(
            asset,
            list_complementary_rows(db, asset.id),
            list_component_rows(db, asset.id),
            now,
        )
        for asset in list_assets(db, limit=limit, offset=offset)
    ]
