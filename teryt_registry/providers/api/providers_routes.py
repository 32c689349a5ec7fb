# teryt_registry/providers/api/providers_routes.py
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request, Response
from sqlalchemy.orm import Session

from teryt_registry.db.session import get_db
from teryt_registry.providers.schemas import ProviderOut, ProviderPageOut
from teryt_registry.services.providers.provider_service import ProviderService
from teryt_registry.users.identity.principal import Principal
from teryt_registry.users.identity.rbac.dependencies import current_principal


router = APIRouter(prefix="/providers", tags=["providers"])


@router.get("", response_model=ProviderPageOut, response_model_by_alias=True)
def providers_list(
    request: Request,
    db: Session = Depends(get_db),
    me: Optional[Principal] = Depends(current_principal),
):
    page = ProviderService(db).list(me, dict(request.query_params))
    return ProviderPageOut(
        data=[ProviderOut.from_model(p) for p in page.items],
        page=page.page,
        page_size=page.page_size,
        total=page.total,
    )


@router.get("/{provider_id}", response_model=ProviderOut)
def providers_get(
    provider_id: str,
    db: Session = Depends(get_db),
    me: Optional[Principal] = Depends(current_principal),
):
    return ProviderOut.from_model(ProviderService(db).get_by_id(provider_id, me))


@router.post("", response_model=ProviderOut, status_code=201)
def providers_create(
    payload: Any = Body(default=None),
    db: Session = Depends(get_db),
    me: Optional[Principal] = Depends(current_principal),
):
    return ProviderOut.from_model(ProviderService(db).create(payload, me))


@router.put("/{provider_id}", response_model=ProviderOut)
def providers_update(
    provider_id: str,
    payload: Any = Body(default=None),
    db: Session = Depends(get_db),
    me: Optional[Principal] = Depends(current_principal),
):
    return ProviderOut.from_model(ProviderService(db).update(provider_id, payload, me))


@router.delete("/{provider_id}", status_code=204)
def providers_delete(
    provider_id: str,
    db: Session = Depends(get_db),
    me: Optional[Principal] = Depends(current_principal),
):
    ProviderService(db).delete(provider_id, me)
    return Response(status_code=204)
