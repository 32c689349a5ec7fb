from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Session

from teryt_registry.db.models.teryt import City, CityDistrict, Community, District, Street, Voivodeship
from teryt_registry.domains.teryt.enums import Level


@dataclass(frozen=True)
class AdministrativeUnit:
    level: Level
    code: str
    name: str
    parent_code: Optional[str]


# poziom -> (model, kolumna z kodem rodzica)
_TABLES: dict[Level, tuple[Any, Optional[str]]] = {
    Level.VOIVODESHIP: (Voivodeship, None),
    Level.DISTRICT: (District, "voivodeship_code"),
    Level.COMMUNITY: (Community, "district_code"),
    Level.CITY: (City, "community_code"),
    Level.CITY_DISTRICT: (CityDistrict, "city_code"),
    Level.STREET: (Street, "city_code"),
}


def model_for(level: Level) -> Any:
    return _TABLES[level][0]


def parent_column_for(level: Level) -> Optional[str]:
    return _TABLES[level][1]


def _to_unit(level: Level, row: Any) -> AdministrativeUnit:
    parent_attr = parent_column_for(level)
    return AdministrativeUnit(
        level=level,
        code=str(row.code),
        name=str(row.name),
        parent_code=str(getattr(row, parent_attr)) if parent_attr else None,
    )


class TerytRepository:
    """Odczyt słowników TERYT (6 poziomów). Tylko read: rdzeń nigdy tego nie mutuje."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_code(self, level: Level, code: str) -> AdministrativeUnit | None:
        row = self._db.get(model_for(level), code)
        return _to_unit(level, row) if row is not None else None

    def exists(self, level: Level, code: str) -> bool:
        return self.find_by_code(level, code) is not None

    def _filtered(self, stmt, level: Level, *, parent_code: Optional[str], search: Optional[str]):
        model = model_for(level)
        parent_attr = parent_column_for(level)
        if parent_code and parent_attr:
            stmt = stmt.where(getattr(model, parent_attr) == parent_code)
        if search:
            stmt = stmt.where(model.name.ilike(f"%{search}%"))
        return stmt

    def list_units(
        self,
        level: Level,
        *,
        parent_code: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[AdministrativeUnit]:
        model = model_for(level)
        stmt = self._filtered(sa.select(model), level, parent_code=parent_code, search=search)
        stmt = stmt.order_by(model.name.asc(), model.code.asc()).limit(limit).offset(offset)
        return [_to_unit(level, r) for r in self._db.execute(stmt).scalars().all()]

    def count_units(self, level: Level, *, parent_code: Optional[str] = None, search: Optional[str] = None) -> int:
        model = model_for(level)
        stmt = self._filtered(sa.select(sa.func.count()).select_from(model), level, parent_code=parent_code, search=search)
        return int(self._db.execute(stmt).scalar_one() or 0)
