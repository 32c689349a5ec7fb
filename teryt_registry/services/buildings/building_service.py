from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from teryt_registry.buildings.schemas import BuildingCommandIn, BuildingListQueryIn
from teryt_registry.db.models.buildings import Building
from teryt_registry.domains.buildings.enums import BuildingStatus
from teryt_registry.domains.buildings.repositories import (
    BuildingFilter,
    BuildingRepository,
    DuplicateAddressError,
    MissingProviderError,
)
from teryt_registry.domains.providers.repositories import ProviderRepository
from teryt_registry.domains.teryt.enums import Level
from teryt_registry.domains.teryt.repositories import TerytRepository
from teryt_registry.services.geo.bounds import check_bounds
from teryt_registry.shared.errors import Conflict, NotFound, UnresolvedReference, service_boundary
from teryt_registry.shared.pagination import Page, ensure_page_in_range, offset_for
from teryt_registry.shared.validation import parse_command
from teryt_registry.teryt.services.hierarchy_validator import HierarchyCodes, HierarchyValidator, ResolvedChain
from teryt_registry.teryt.utils.normalize import normalize_building_no
from teryt_registry.users.identity.principal import Principal
from teryt_registry.users.identity.rbac.actions import Action
from teryt_registry.users.identity.rbac.policy_engine import ensure_allowed

logger = logging.getLogger(__name__)

# filtr listy -> poziom TERYT, którego kod musi istnieć
_FILTER_LEVELS: dict[str, Level] = {
    "voivodeship_code": Level.VOIVODESHIP,
    "district_code": Level.DISTRICT,
    "community_code": Level.COMMUNITY,
    "city_code": Level.CITY,
    "city_district_code": Level.CITY_DISTRICT,
    "street_code": Level.STREET,
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_id(raw: Any) -> uuid.UUID:
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError):
        # niepoprawny identyfikator nie może wskazywać żadnego rekordu
        raise NotFound(message=f"Budynek {raw} nie istnieje.", details={"id": str(raw)})


class BuildingService:
    """Rejestracja budynków (bez HTTP).

    Kolejność kroków przy create/update jest stała, więc ten sam błędny
    request zawsze dostaje ten sam błąd:
    1) uprawnienia  2) kształt/formaty  3) (update) istnienie rekordu
    4) łańcuch TERYT  5) zakres współrzędnych  6) dostawca  7) unikalność adresu.
    Pierwsza porażka kończy operację i nic nie zostaje zapisane.
    """

    def __init__(self, db: Session) -> None:
        self._db = db
        self._buildings = BuildingRepository(db)
        self._providers = ProviderRepository(db)
        self._teryt = TerytRepository(db)
        self._hierarchy = HierarchyValidator(self._teryt)

    # ---------------------------------------------------------------- helpers

    def _get_active(self, building_id: uuid.UUID) -> Building:
        obj = self._buildings.get(building_id)
        if obj is None or obj.status != BuildingStatus.ACTIVE.value:
            raise NotFound(message=f"Budynek {building_id} nie istnieje.", details={"id": str(building_id)})
        return obj

    def _validate_references(self, cmd: BuildingCommandIn) -> ResolvedChain:
        chain = self._hierarchy.validate(
            HierarchyCodes(
                voivodeship=cmd.voivodeship_code,
                district=cmd.district_code,
                community=cmd.community_code,
                city=cmd.city_code,
                city_district=cmd.city_district_code,
                street=cmd.street_code,
            )
        )

        check_bounds(cmd.latitude, cmd.longitude)

        if not self._providers.exists(cmd.provider_id):
            raise UnresolvedReference(
                message=f"Dostawca {cmd.provider_id} nie istnieje.",
                details={"field": "provider_id", "provider_id": cmd.provider_id},
            )
        return chain

    def _ensure_unique(self, cmd: BuildingCommandIn, *, exclude_id: Optional[uuid.UUID] = None) -> str:
        norm = normalize_building_no(cmd.building_number)
        if self._buildings.exists_unique(
            city_code=cmd.city_code,
            street_code=cmd.street_code,
            building_number_norm=norm,
            exclude_id=exclude_id,
        ):
            raise self._duplicate(cmd)
        return norm

    @staticmethod
    def _duplicate(cmd: BuildingCommandIn) -> Conflict:
        return Conflict(
            message=f"Budynek pod adresem {cmd.city_code}/{cmd.street_code or '-'}/{cmd.building_number} już istnieje.",
            details={
                "field": "building_number",
                "city_code": cmd.city_code,
                "street_code": cmd.street_code,
                "building_number": cmd.building_number,
            },
        )

    @staticmethod
    def _values(cmd: BuildingCommandIn, chain: ResolvedChain, norm: str) -> dict[str, Any]:
        return {
            "voivodeship_code": cmd.voivodeship_code,
            "district_code": cmd.district_code,
            "community_code": cmd.community_code,
            "city_code": cmd.city_code,
            "city_district_code": cmd.city_district_code,
            "street_code": cmd.street_code,
            "voivodeship_name": chain.name_for(Level.VOIVODESHIP),
            "district_name": chain.name_for(Level.DISTRICT),
            "community_name": chain.name_for(Level.COMMUNITY),
            "city_name": chain.name_for(Level.CITY),
            "city_district_name": chain.name_for(Level.CITY_DISTRICT),
            "street_name": chain.name_for(Level.STREET),
            "building_number": cmd.building_number,
            "building_number_norm": norm,
            "post_code": cmd.post_code,
            "location": cmd.point,
            "provider_id": cmd.provider_id,
        }

    def _write(self, cmd: BuildingCommandIn, fn, *args: Any) -> Building:
        try:
            return fn(*args)
        except DuplicateAddressError:
            # wyścig: ktoś zapisał ten sam adres między pre-checkiem a flush
            raise self._duplicate(cmd)
        except MissingProviderError:
            raise UnresolvedReference(
                message=f"Dostawca {cmd.provider_id} nie istnieje.",
                details={"field": "provider_id", "provider_id": cmd.provider_id},
            )

    # --------------------------------------------------------------- commands

    @service_boundary("buildings.create")
    def create(self, cmd: Mapping[str, Any] | BuildingCommandIn, principal: Optional[Principal]) -> Building:
        actor = ensure_allowed(principal, Action.BUILDINGS_CREATE)
        data = parse_command(BuildingCommandIn, cmd)

        chain = self._validate_references(data)
        norm = self._ensure_unique(data)

        now = _now()
        values = self._values(data, chain, norm)
        values.update(
            status=BuildingStatus.ACTIVE.value,
            created_by=actor.id,
            updated_by=actor.id,
            created_at=now,
            updated_at=now,
        )
        obj = self._write(data, self._buildings.insert, values)
        self._db.commit()
        self._db.refresh(obj)

        logger.info("building created id=%s city=%s number=%s", obj.id, obj.city_code, obj.building_number)
        return obj

    @service_boundary("buildings.update")
    def update(
        self,
        building_id: Any,
        cmd: Mapping[str, Any] | BuildingCommandIn,
        principal: Optional[Principal],
    ) -> Building:
        actor = ensure_allowed(principal, Action.BUILDINGS_UPDATE)
        data = parse_command(BuildingCommandIn, cmd)
        obj = self._get_active(_parse_id(building_id))

        chain = self._validate_references(data)
        norm = self._ensure_unique(data, exclude_id=obj.id)

        values = self._values(data, chain, norm)
        values.update(updated_by=actor.id, updated_at=_now())
        self._write(data, self._buildings.update, obj, values)
        self._db.commit()
        self._db.refresh(obj)

        logger.info("building updated id=%s", obj.id)
        return obj

    @service_boundary("buildings.delete")
    def delete(self, building_id: Any, principal: Optional[Principal]) -> None:
        """Aktywny budynek -> status 'deleted' (zwalnia adres). Już usunięty -> fizyczne usunięcie."""
        actor = ensure_allowed(principal, Action.BUILDINGS_DELETE)
        bid = _parse_id(building_id)
        obj = self._buildings.get(bid)
        if obj is None:
            raise NotFound(message=f"Budynek {bid} nie istnieje.", details={"id": str(bid)})

        if obj.status == BuildingStatus.ACTIVE.value:
            self._buildings.update(
                obj,
                {"status": BuildingStatus.DELETED.value, "updated_by": actor.id, "updated_at": _now()},
            )
            self._db.commit()
            logger.info("building soft-deleted id=%s", bid)
            return

        self._buildings.delete_by_id(bid)
        self._db.commit()
        logger.info("building purged id=%s", bid)

    # ----------------------------------------------------------------- reads

    @service_boundary("buildings.get")
    def get_by_id(self, building_id: Any, principal: Optional[Principal]) -> Building:
        ensure_allowed(principal, Action.BUILDINGS_READ)
        bid = _parse_id(building_id)
        obj = self._buildings.get(bid)
        if obj is None:
            raise NotFound(message=f"Budynek {bid} nie istnieje.", details={"id": str(bid)})
        return obj

    @service_boundary("buildings.list")
    def list(self, principal: Optional[Principal], query: Mapping[str, Any] | BuildingListQueryIn | None = None) -> Page[Building]:
        ensure_allowed(principal, Action.BUILDINGS_READ)
        q = parse_command(BuildingListQueryIn, query or {})

        flt = BuildingFilter(
            voivodeship_code=q.voivodeship_code,
            district_code=q.district_code,
            community_code=q.community_code,
            city_code=q.city_code,
            city_district_code=q.city_district_code,
            street_code=q.street_code,
            provider_id=q.provider_id,
            status=q.status,
        )

        # dobrze sformatowany, ale nieznany kod to błąd, a nie pusta lista
        for field, level in _FILTER_LEVELS.items():
            code = getattr(flt, field)
            if code is not None and not self._teryt.exists(level, code):
                raise UnresolvedReference(
                    message=f"{level.value}: kod {code} nie istnieje w TERYT.",
                    details={"field": field, "level": level.value, "code": code},
                )
        if flt.provider_id is not None and not self._providers.exists(flt.provider_id):
            raise UnresolvedReference(
                message=f"Dostawca {flt.provider_id} nie istnieje.",
                details={"field": "provider_id", "provider_id": flt.provider_id},
            )

        total = self._buildings.count(flt)
        ensure_page_in_range(total=total, page=q.page, page_size=q.page_size)
        items = self._buildings.list_page(flt, limit=q.page_size, offset=offset_for(q.page, q.page_size))
        return Page(items=items, page=q.page, page_size=q.page_size, total=total)
