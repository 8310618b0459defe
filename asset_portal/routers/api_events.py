from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..crud.events import create_event, list_events, require_event, to_record, update_event
from ..db.session import get_db
from ..schemas.event import EventRecord, EventUpdate

router = APIRouter(prefix="/api/v1/events", tags=["events"])


@router.get("", response_model=list[EventRecord])
def api_list(asset_id: Optional[str] = None, limit: int = 200, offset: int = 0, db: Session = Depends(get_db)):
    return [to_record(event) for event in list_events(db, asset_id=asset_id, limit=limit, offset=offset)]


@router.get("/{event_id}", response_model=EventRecord)
def api_get(event_id: str, db: Session = Depends(get_db)):
    return to_record(require_event(db, event_id))


@router.post("", response_model=EventRecord, status_code=status.HTTP_201_CREATED)
def api_create(payload: EventRecord = Body(...), db: Session = Depends(get_db)):
    try:
        event = create_event(db, payload)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return to_record(event)


@router.put("/{event_id}", response_model=EventRecord)
def api_update(event_id: str, payload: EventUpdate = Body(...), db: Session = Depends(get_db)):
    try:
        event = update_event(db, event_id, payload)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return to_record(event)
