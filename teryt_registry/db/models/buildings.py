# teryt_registry/db/models/buildings.py
from __future__ import annotations

from datetime import datetime
import uuid

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
    literal_column,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teryt_registry.db.models.base import Base, fk_target
from teryt_registry.db.models.providers import Provider
from teryt_registry.db.types.pg_point import PGPoint


class Building(Base):
    __tablename__ = "buildings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # kody TERYT (źródło prawdy)
    voivodeship_code: Mapped[str] = mapped_column(String(8), nullable=False, index=True)
    district_code: Mapped[str] = mapped_column(String(8), nullable=False, index=True)
    community_code: Mapped[str] = mapped_column(String(8), nullable=False, index=True)
    city_code: Mapped[str] = mapped_column(String(8), nullable=False, index=True)
    city_district_code: Mapped[str | None] = mapped_column(String(8), nullable=True)
    street_code: Mapped[str | None] = mapped_column(String(8), nullable=True)

    # nazwy zdenormalizowane w chwili zapisu (lista bez joinów do 6 słowników)
    voivodeship_name: Mapped[str] = mapped_column(Text, nullable=False)
    district_name: Mapped[str] = mapped_column(Text, nullable=False)
    community_name: Mapped[str] = mapped_column(Text, nullable=False)
    city_name: Mapped[str] = mapped_column(Text, nullable=False)
    city_district_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    street_name: Mapped[str | None] = mapped_column(Text, nullable=True)

    # numer dokładnie tak jak podał użytkownik + forma znormalizowana do unikalności
    building_number: Mapped[str] = mapped_column(String(32), nullable=False)
    building_number_norm: Mapped[str] = mapped_column(String(32), nullable=False)
    post_code: Mapped[str | None] = mapped_column(String(6), nullable=True)

    # Postgres POINT: (x,y) = (lon,lat)
    location: Mapped[tuple[float, float]] = mapped_column(PGPoint(), nullable=False)

    provider_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey(fk_target("providers"), ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    provider: Mapped[Provider] = relationship(Provider, lazy="joined")

    status: Mapped[str] = mapped_column(String(16), nullable=False, server_default=text("'active'"))

    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    updated_by: Mapped[str] = mapped_column(String(64), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# Twarda gwarancja unikalności adresu (pre-check w serwisie daje tylko ładniejszy komunikat).
# Brak ulicy = stały sentinel '' w indeksie, liczą się tylko aktywne budynki.
Index(
    "uq_buildings_active_address",
    Building.city_code,
    func.coalesce(Building.street_code, literal_column("''")),
    Building.building_number_norm,
    unique=True,
    postgresql_where=text("status = 'active'"),
    sqlite_where=text("status = 'active'"),
)
