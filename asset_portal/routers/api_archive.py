from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..crud.archive import (
    append_archive_record,
    remove_archive_record,
    replace_archive,
    update_archive_record,
)
from ..db.session import get_db
from ..schemas.archive import ArchiveOut, ArchiveRecordWrite, ArchiveUpdate, ItemType

router = APIRouter(prefix="/api/v1/archive", tags=["archive"])


def _out(item_type: str, item) -> ArchiveOut:
    return ArchiveOut(
        id=item.id,
        type=item_type,
        archive_version=item.archive_version or 0,
        archive=item.archive or [],
    )


@router.put("", response_model=ArchiveOut)
def api_replace(payload: ArchiveUpdate, db: Session = Depends(get_db)):
    try:
        item = replace_archive(db, payload.type, payload.id, payload.archive, payload.expected_version)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _out(payload.type, item)


@router.post("/{item_type}/{item_id}/records", response_model=ArchiveOut, status_code=201)
def api_append(item_type: ItemType, item_id: str, payload: ArchiveRecordWrite, db: Session = Depends(get_db)):
    record = payload.model_dump(exclude={"expected_version"})
    try:
        item = append_archive_record(db, item_type, item_id, record, payload.expected_version)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _out(item_type, item)


@router.put("/{item_type}/{item_id}/records/{record_id}", response_model=ArchiveOut)
def api_update_record(
    item_type: ItemType,
    item_id: str,
    record_id: str,
    payload: ArchiveRecordWrite,
    db: Session = Depends(get_db),
):
    record = payload.model_dump(exclude={"expected_version"})
    try:
        item = update_archive_record(db, item_type, item_id, record_id, record, payload.expected_version)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _out(item_type, item)


@router.delete("/{item_type}/{item_id}/records/{record_id}", response_model=ArchiveOut)
def api_remove_record(
    item_type: ItemType,
    item_id: str,
    record_id: str,
    expected_version: Optional[int] = None,
    db: Session = Depends(get_db),
):
    try:
        item = remove_archive_record(db, item_type, item_id, record_id, expected_version)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _out(item_type, item)
