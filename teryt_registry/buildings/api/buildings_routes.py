# teryt_registry/buildings/api/buildings_routes.py
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request, Response
from sqlalchemy.orm import Session

from teryt_registry.buildings.schemas import BuildingOut, BuildingPageOut
from teryt_registry.db.session import get_db
from teryt_registry.services.buildings.building_service import BuildingService
from teryt_registry.users.identity.principal import Principal
from teryt_registry.users.identity.rbac.dependencies import current_principal


router = APIRouter(prefix="/buildings", tags=["buildings"])


@router.get("", response_model=BuildingPageOut, response_model_by_alias=True)
def buildings_list(
    request: Request,
    db: Session = Depends(get_db),
    me: Optional[Principal] = Depends(current_principal),
):
    # query string idzie w całości do serwisu: tam jest walidacja i 400/404
    page = BuildingService(db).list(me, dict(request.query_params))
    return BuildingPageOut(
        data=[BuildingOut.from_model(b) for b in page.items],
        page=page.page,
        page_size=page.page_size,
        total=page.total,
    )


@router.get("/{building_id}", response_model=BuildingOut)
def buildings_get(
    building_id: str,
    db: Session = Depends(get_db),
    me: Optional[Principal] = Depends(current_principal),
):
    return BuildingOut.from_model(BuildingService(db).get_by_id(building_id, me))


@router.post("", response_model=BuildingOut, status_code=201)
def buildings_create(
    payload: Any = Body(default=None),
    db: Session = Depends(get_db),
    me: Optional[Principal] = Depends(current_principal),
):
    return BuildingOut.from_model(BuildingService(db).create(payload, me))


@router.put("/{building_id}", response_model=BuildingOut)
def buildings_update(
    building_id: str,
    payload: Any = Body(default=None),
    db: Session = Depends(get_db),
    me: Optional[Principal] = Depends(current_principal),
):
    return BuildingOut.from_model(BuildingService(db).update(building_id, payload, me))


@router.delete("/{building_id}", status_code=204)
def buildings_delete(
    building_id: str,
    db: Session = Depends(get_db),
    me: Optional[Principal] = Depends(current_principal),
):
    BuildingService(db).delete(building_id, me)
    return Response(status_code=204)
