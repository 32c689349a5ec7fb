from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Optional
import uuid

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teryt_registry.db.errors import is_foreign_key_violation, is_unique_violation
from teryt_registry.db.models.buildings import Building
from teryt_registry.domains.buildings.enums import BuildingStatus


class BuildingRepoError(RuntimeError):
    pass


class DuplicateAddressError(BuildingRepoError):
    """Naruszenie uq_buildings_active_address (wyścig dwóch create na ten sam adres)."""


class MissingProviderError(BuildingRepoError):
    """FK provider_id: dostawca zniknął między sprawdzeniem a zapisem."""


@dataclass(frozen=True)
class BuildingFilter:
    """Filtry listy: wszystkie łączone przez AND, None = brak filtra."""

    voivodeship_code: Optional[str] = None
    district_code: Optional[str] = None
    community_code: Optional[str] = None
    city_code: Optional[str] = None
    city_district_code: Optional[str] = None
    street_code: Optional[str] = None
    provider_id: Optional[int] = None
    status: Optional[str] = None

    def active_items(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


class BuildingRepository:
    """Repo dla buildings.

    Cel: proste, testowalne operacje DB bez logiki biznesowej.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, building_id: uuid.UUID) -> Building | None:
        return self._db.get(Building, building_id)

    def exists_unique(
        self,
        *,
        city_code: str,
        street_code: Optional[str],
        building_number_norm: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> bool:
        stmt = (
            sa.select(Building.id)
            .where(Building.city_code == city_code)
            .where(Building.building_number_norm == building_number_norm)
            .where(Building.status == BuildingStatus.ACTIVE.value)
        )
        if street_code:
            stmt = stmt.where(Building.street_code == street_code)
        else:
            stmt = stmt.where(Building.street_code.is_(None))
        if exclude_id is not None:
            stmt = stmt.where(Building.id != exclude_id)
        return self._db.execute(stmt.limit(1)).first() is not None

    def _flush(self, what: str) -> None:
        try:
            self._db.flush()
        except IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateAddressError(f"Building {what} failed: duplicate address") from e
            if is_foreign_key_violation(e):
                raise MissingProviderError(f"Building {what} failed: provider missing") from e
            raise BuildingRepoError(f"Building {what} failed: {e}") from e

    def insert(self, values: dict[str, Any]) -> Building:
        obj = Building(**values)
        self._db.add(obj)
        self._flush("create")
        return obj

    def update(self, obj: Building, values: dict[str, Any]) -> Building:
        for k, v in values.items():
            setattr(obj, k, v)
        self._flush("update")
        return obj

    def delete_by_id(self, building_id: uuid.UUID) -> None:
        self._db.execute(sa.delete(Building).where(Building.id == building_id))

    def _filtered(self, stmt, flt: BuildingFilter):
        for name, value in flt.active_items().items():
            stmt = stmt.where(getattr(Building, name) == value)
        return stmt

    def list_page(self, flt: BuildingFilter, *, limit: int, offset: int) -> list[Building]:
        stmt = self._filtered(sa.select(Building), flt)
        stmt = stmt.order_by(Building.created_at.asc(), Building.id.asc()).limit(limit).offset(offset)
        return list(self._db.execute(stmt).scalars().unique().all())

    def count(self, flt: BuildingFilter) -> int:
        stmt = self._filtered(sa.select(sa.func.count()).select_from(Building), flt)
        return int(self._db.execute(stmt).scalar_one() or 0)
