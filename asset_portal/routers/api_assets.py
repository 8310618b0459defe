from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..crud.assets import (
    add_complementary,
    add_component,
    create_asset_bundle,
    get_asset_aggregate,
    list_asset_aggregates,
    update_asset_state,
)
from ..db.session import get_db
from ..schemas.asset import (
    AssetAggregate,
    AssetBundleCreate,
    AssetStateUpdate,
    ComplementaryCreate,
    ComponentCreate,
)
from ..services.report import build_asset_report, group_catalog_by_initial

router = APIRouter(prefix="/api/v1/assets", tags=["assets"])


@router.get("", response_model=list[AssetAggregate])
def api_list(limit: int = 500, offset: int = 0, db: Session = Depends(get_db)):
    return list_asset_aggregates(db, limit=limit, offset=offset)


@router.get("/catalog", response_model=dict[str, list[AssetAggregate]])
def api_catalog(db: Session = Depends(get_db)):
    return group_catalog_by_initial(list_asset_aggregates(db))


@router.get("/{asset_id}", response_model=AssetAggregate)
def api_get(asset_id: str, db: Session = Depends(get_db)):
    return get_asset_aggregate(db, asset_id)


@router.get("/{asset_id}/report")
def api_report(asset_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    """JSON document consumed by the print/PDF renderer."""
    return build_asset_report(get_asset_aggregate(db, asset_id))


@router.post("", response_model=AssetAggregate, status_code=status.HTTP_201_CREATED)
def api_create(payload: AssetBundleCreate, db: Session = Depends(get_db)):
    asset = create_asset_bundle(
        db,
        payload.asset.model_dump(),
        [item.model_dump() for item in payload.complementary_items],
        [item.model_dump() for item in payload.component_items],
    )
    return get_asset_aggregate(db, asset.id)


@router.post("/{asset_id}/complementary", response_model=AssetAggregate, status_code=status.HTTP_201_CREATED)
def api_add_complementary(asset_id: str, payload: ComplementaryCreate, db: Session = Depends(get_db)):
    add_complementary(db, asset_id, payload.model_dump())
    return get_asset_aggregate(db, asset_id)


@router.post("/{asset_id}/components", response_model=AssetAggregate, status_code=status.HTTP_201_CREATED)
def api_add_component(asset_id: str, payload: ComponentCreate, db: Session = Depends(get_db)):
    add_component(db, asset_id, payload.model_dump())
    return get_asset_aggregate(db, asset_id)


@router.put("/{asset_id}/state", response_model=AssetAggregate)
def api_update_state(asset_id: str, payload: AssetStateUpdate, db: Session = Depends(get_db)):
    try:
        update_asset_state(
            db,
            asset_id,
            status=payload.status,
            active_date=payload.active_date,
            notes=payload.notes,
            primary_user=payload.primary_user,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return get_asset_aggregate(db, asset_id)
