from __future__ import annotations

from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from teryt_registry.domains.teryt.enums import Level
from teryt_registry.domains.teryt.repositories import AdministrativeUnit, TerytRepository
from teryt_registry.shared.errors import NotFound, ValidationError, service_boundary
from teryt_registry.shared.pagination import Page, ensure_page_in_range, offset_for
from teryt_registry.shared.validation import parse_command
from teryt_registry.teryt.schemas import TerytListQueryIn
from teryt_registry.users.identity.principal import Principal
from teryt_registry.users.identity.rbac.actions import Action
from teryt_registry.users.identity.rbac.policy_engine import ensure_allowed


def _level(resource: str) -> Level:
    level = Level.from_resource(resource)
    if level is None:
        allowed = [lv.resource for lv in Level]
        raise ValidationError(
            message=f"Nieznany słownik TERYT: {resource}.",
            details={"field": "resource", "resource": resource, "allowed": allowed},
        )
    return level


class TerytLookupService:
    """Odczyt słowników TERYT przez API (formularze, filtry). Bez zapisu."""

    def __init__(self, db: Session) -> None:
        self._db = db
        self._repo = TerytRepository(db)

    @service_boundary("teryt.list")
    def list(
        self,
        resource: str,
        principal: Optional[Principal],
        query: Mapping[str, Any] | TerytListQueryIn | None = None,
    ) -> Page[AdministrativeUnit]:
        ensure_allowed(principal, Action.TERYT_READ)
        level = _level(resource)
        q = parse_command(TerytListQueryIn, query or {})

        total = self._repo.count_units(level, parent_code=q.parent_code, search=q.search)
        ensure_page_in_range(total=total, page=q.page, page_size=q.page_size)
        items = self._repo.list_units(
            level,
            parent_code=q.parent_code,
            search=q.search,
            limit=q.page_size,
            offset=offset_for(q.page, q.page_size),
        )
        return Page(items=items, page=q.page, page_size=q.page_size, total=total)

    @service_boundary("teryt.get")
    def get_by_code(self, resource: str, code: str, principal: Optional[Principal]) -> AdministrativeUnit:
        ensure_allowed(principal, Action.TERYT_READ)
        level = _level(resource)
        unit = self._repo.find_by_code(level, code)
        if unit is None:
            raise NotFound(
                message=f"{level.value}: kod {code} nie istnieje w TERYT.",
                details={"level": level.value, "code": code},
            )
        return unit
