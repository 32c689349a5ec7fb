from __future__ import annotations

from typing import Any, Optional

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teryt_registry.db.errors import is_foreign_key_violation, is_unique_violation
from teryt_registry.db.models.buildings import Building
from teryt_registry.db.models.providers import Provider


class ProviderRepoError(RuntimeError):
    pass


class DuplicateProviderNameError(ProviderRepoError):
    pass


class ProviderInUseError(ProviderRepoError):
    """FK RESTRICT z buildings: budynek dopisany między sprawdzeniem a usunięciem."""


class ProviderRepository:
    """Repo dla providers.

    Zero logiki biznesowej: tylko operacje zapisu/odczytu.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, provider_id: int) -> Provider | None:
        return self._db.get(Provider, provider_id)

    def exists(self, provider_id: int) -> bool:
        stmt = sa.select(sa.literal(1)).select_from(Provider).where(Provider.id == provider_id).limit(1)
        return self._db.execute(stmt).first() is not None

    def exists_name(self, name: str, *, exclude_id: Optional[int] = None) -> bool:
        stmt = sa.select(Provider.id).where(sa.func.lower(Provider.name) == name.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(Provider.id != exclude_id)
        return self._db.execute(stmt.limit(1)).first() is not None

    def is_referenced_by_building(self, provider_id: int) -> bool:
        # każdy status (także 'deleted') blokuje usunięcie: brak kaskady, brak sierot
        stmt = sa.select(Building.id).where(Building.provider_id == provider_id).limit(1)
        return self._db.execute(stmt).first() is not None

    def _flush(self, what: str) -> None:
        try:
            self._db.flush()
        except IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateProviderNameError(f"Provider {what} failed: duplicate name") from e
            raise ProviderRepoError(f"Provider {what} failed: {e}") from e

    def insert(self, *, name: str, technology: str, bandwidth: int) -> Provider:
        obj = Provider(name=name, technology=technology, bandwidth=bandwidth)
        self._db.add(obj)
        self._flush("create")
        return obj

    def update(self, obj: Provider, values: dict[str, Any]) -> Provider:
        for k, v in values.items():
            setattr(obj, k, v)
        self._flush("update")
        return obj

    def delete_by_id(self, provider_id: int) -> None:
        try:
            self._db.execute(sa.delete(Provider).where(Provider.id == provider_id))
            self._db.flush()
        except IntegrityError as e:
            if is_foreign_key_violation(e):
                raise ProviderInUseError(f"Provider delete failed: {provider_id} referenced by buildings") from e
            raise ProviderRepoError(f"Provider delete failed: {e}") from e

    def _filtered(self, stmt, *, search: Optional[str], technology: Optional[str]):
        if search:
            stmt = stmt.where(Provider.name.ilike(f"%{search}%"))
        if technology:
            stmt = stmt.where(Provider.technology.ilike(f"%{technology}%"))
        return stmt

    def list_page(
        self,
        *,
        search: Optional[str] = None,
        technology: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[Provider]:
        stmt = self._filtered(sa.select(Provider), search=search, technology=technology)
        stmt = stmt.order_by(Provider.name.asc(), Provider.id.asc()).limit(limit).offset(offset)
        return list(self._db.execute(stmt).scalars().all())

    def count(self, *, search: Optional[str] = None, technology: Optional[str] = None) -> int:
        stmt = self._filtered(sa.select(sa.func.count()).select_from(Provider), search=search, technology=technology)
        return int(self._db.execute(stmt).scalar_one() or 0)
