# teryt_registry/teryt/api/teryt_routes.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from teryt_registry.db.session import get_db
from teryt_registry.teryt.schemas import TerytPageOut, TerytUnitOut
from teryt_registry.teryt.services.teryt_lookup import TerytLookupService
from teryt_registry.users.identity.principal import Principal
from teryt_registry.users.identity.rbac.dependencies import current_principal


router = APIRouter(prefix="/teryt", tags=["teryt"])


@router.get("/{resource}", response_model=TerytPageOut, response_model_by_alias=True)
def teryt_list(
    resource: str,
    request: Request,
    db: Session = Depends(get_db),
    me: Optional[Principal] = Depends(current_principal),
):
    page = TerytLookupService(db).list(resource, me, dict(request.query_params))
    return TerytPageOut(
        data=[TerytUnitOut.from_unit(u) for u in page.items],
        page=page.page,
        page_size=page.page_size,
        total=page.total,
    )


@router.get("/{resource}/{code}", response_model=TerytUnitOut)
def teryt_get(
    resource: str,
    code: str,
    db: Session = Depends(get_db),
    me: Optional[Principal] = Depends(current_principal),
):
    return TerytUnitOut.from_unit(TerytLookupService(db).get_by_code(resource, code, me))
