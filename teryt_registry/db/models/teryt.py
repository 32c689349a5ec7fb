# teryt_registry/db/models/teryt.py
from __future__ import annotations

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from teryt_registry.db.models.base import Base, fk_target


# Słowniki TERYT: dane referencyjne, ładowane skryptem (scripts/teryt_load.py).
# Rdzeń aplikacji tylko je czyta.
#
# Kody to stringi o stałym formacie, wiodące zera mają znaczenie:
#   woj 2 cyfry, pow 4, gmi 7 (z rodzajem), SIMC 7, dzielnica 7, ULIC 5


class Voivodeship(Base):
    __tablename__ = "voivodeships"

    code: Mapped[str] = mapped_column(String(8), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)


class District(Base):
    __tablename__ = "districts"

    code: Mapped[str] = mapped_column(String(8), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    voivodeship_code: Mapped[str] = mapped_column(
        ForeignKey(fk_target("voivodeships", "code")), nullable=False, index=True
    )


class Community(Base):
    __tablename__ = "communities"

    code: Mapped[str] = mapped_column(String(8), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    # rodzaj gminy (miejska / wiejska / miejsko-wiejska...) wprost z TERC
    type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    district_code: Mapped[str] = mapped_column(
        ForeignKey(fk_target("districts", "code")), nullable=False, index=True
    )


class City(Base):
    __tablename__ = "cities"

    code: Mapped[str] = mapped_column(String(8), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    community_code: Mapped[str] = mapped_column(
        ForeignKey(fk_target("communities", "code")), nullable=False, index=True
    )


class CityDistrict(Base):
    __tablename__ = "city_districts"

    code: Mapped[str] = mapped_column(String(8), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    city_code: Mapped[str] = mapped_column(ForeignKey(fk_target("cities", "code")), nullable=False, index=True)


class Street(Base):
    __tablename__ = "streets"

    code: Mapped[str] = mapped_column(String(8), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    city_code: Mapped[str] = mapped_column(ForeignKey(fk_target("cities", "code")), nullable=False, index=True)
