from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from teryt_registry.db.models.providers import Provider
from teryt_registry.domains.providers.repositories import (
    DuplicateProviderNameError,
    ProviderInUseError,
    ProviderRepository,
)
from teryt_registry.providers.schemas import ProviderCreateIn, ProviderListQueryIn, ProviderUpdateIn
from teryt_registry.shared.errors import Conflict, NotFound, ReferencedByBuilding, ValidationError, service_boundary
from teryt_registry.shared.pagination import Page, ensure_page_in_range, offset_for
from teryt_registry.shared.validation import parse_command
from teryt_registry.users.identity.principal import Principal
from teryt_registry.users.identity.rbac.actions import Action
from teryt_registry.users.identity.rbac.policy_engine import ensure_allowed

logger = logging.getLogger(__name__)


def _parse_id(raw: Any) -> int:
    try:
        pid = int(raw)
    except (TypeError, ValueError):
        raise NotFound(message=f"Dostawca {raw} nie istnieje.", details={"id": str(raw)})
    if isinstance(raw, bool) or pid <= 0:
        raise NotFound(message=f"Dostawca {raw} nie istnieje.", details={"id": str(raw)})
    return pid


def _duplicate_name(name: str) -> Conflict:
    return Conflict(
        message=f"Dostawca o nazwie '{name}' już istnieje.",
        details={"field": "name", "name": name},
    )


def _in_use(pid: int) -> ReferencedByBuilding:
    return ReferencedByBuilding(
        message=f"Dostawca {pid} jest przypisany do budynków i nie może zostać usunięty.",
        details={"id": pid},
    )


class ProviderService:
    """Rejestr dostawców. Usunięcie nigdy nie kaskaduje do budynków."""

    def __init__(self, db: Session) -> None:
        self._db = db
        self._repo = ProviderRepository(db)

    def _get(self, provider_id: int) -> Provider:
        obj = self._repo.get(provider_id)
        if obj is None:
            raise NotFound(message=f"Dostawca {provider_id} nie istnieje.", details={"id": provider_id})
        return obj

    @service_boundary("providers.create")
    def create(self, cmd: Mapping[str, Any] | ProviderCreateIn, principal: Optional[Principal]) -> Provider:
        ensure_allowed(principal, Action.PROVIDERS_CREATE)
        data = parse_command(ProviderCreateIn, cmd)

        if self._repo.exists_name(data.name):
            raise _duplicate_name(data.name)

        try:
            obj = self._repo.insert(name=data.name, technology=data.technology, bandwidth=data.bandwidth)
        except DuplicateProviderNameError:
            raise _duplicate_name(data.name)
        self._db.commit()
        self._db.refresh(obj)

        logger.info("provider created id=%s name=%s", obj.id, obj.name)
        return obj

    @service_boundary("providers.update")
    def update(
        self,
        provider_id: Any,
        cmd: Mapping[str, Any] | ProviderUpdateIn,
        principal: Optional[Principal],
    ) -> Provider:
        ensure_allowed(principal, Action.PROVIDERS_UPDATE)
        data = parse_command(ProviderUpdateIn, cmd)
        obj = self._get(_parse_id(provider_id))

        values = data.model_dump(exclude_none=True)
        if not values:
            raise ValidationError(message="Brak pól do zmiany.", details={"field": "body"})

        name = values.get("name")
        if name is not None and self._repo.exists_name(name, exclude_id=int(obj.id)):
            raise _duplicate_name(name)

        values["updated_at"] = datetime.now(timezone.utc)
        try:
            self._repo.update(obj, values)
        except DuplicateProviderNameError:
            raise _duplicate_name(str(name))
        self._db.commit()
        self._db.refresh(obj)

        logger.info("provider updated id=%s fields=%s", obj.id, sorted(values))
        return obj

    @service_boundary("providers.delete")
    def delete(self, provider_id: Any, principal: Optional[Principal]) -> None:
        ensure_allowed(principal, Action.PROVIDERS_DELETE)
        pid = _parse_id(provider_id)
        self._get(pid)

        # budynek w dowolnym statusie blokuje usunięcie; FK RESTRICT pilnuje wyścigu
        if self._repo.is_referenced_by_building(pid):
            raise _in_use(pid)

        try:
            self._repo.delete_by_id(pid)
        except ProviderInUseError:
            raise _in_use(pid)
        self._db.commit()
        logger.info("provider deleted id=%s", pid)

    @service_boundary("providers.get")
    def get_by_id(self, provider_id: Any, principal: Optional[Principal]) -> Provider:
        ensure_allowed(principal, Action.PROVIDERS_READ)
        return self._get(_parse_id(provider_id))

    @service_boundary("providers.list")
    def list(self, principal: Optional[Principal], query: Mapping[str, Any] | ProviderListQueryIn | None = None) -> Page[Provider]:
        ensure_allowed(principal, Action.PROVIDERS_READ)
        q = parse_command(ProviderListQueryIn, query or {})

        total = self._repo.count(search=q.search, technology=q.technology)
        ensure_page_in_range(total=total, page=q.page, page_size=q.page_size)
        items = self._repo.list_page(
            search=q.search,
            technology=q.technology,
            limit=q.page_size,
            offset=offset_for(q.page, q.page_size),
        )
        return Page(items=items, page=q.page, page_size=q.page_size, total=total)
