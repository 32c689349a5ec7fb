from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from teryt_registry.db.models import City, CityDistrict, Community, District, Provider, Street, Voivodeship
from teryt_registry.db.models.base import Base
from teryt_registry.db.session import enable_sqlite_foreign_keys
from teryt_registry.users.identity.principal import Principal
from teryt_registry.users.identity.rbac.roles import Role

READER = Principal(id="reader-1", role=Role.READ)
WRITER = Principal(id="writer-1", role=Role.WRITE)
ADMIN = Principal(id="admin-1", role=Role.ADMIN)

# Mazowieckie / Warszawa / Mokotów / ul. Puławska
WOJ = "14"
POW = "1465"
GMI = "1465011"
SIMC = "0918123"
DZIELNICA = "0918130"
ULICA = "17026"

# druga gałąź: Małopolskie / Kraków
WOJ_2 = "12"
POW_2 = "1261"
GMI_2 = "1261011"
SIMC_2 = "0950463"
ULICA_2 = "10268"

WARSAW = (21.0122, 52.2297)  # (lon, lat)


def make_engine():
    # SQLite lower() składa tylko ASCII, więc "ŁĄCZNOŚĆ" w bazie nie zrówna się z "łączność";
    # Postgres składa pełne Unicode. Testy nazw z polskimi literami zapisują je małymi.
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    return engine


def make_session_factory():
    return sessionmaker(bind=make_engine(), autoflush=False, autocommit=False, future=True)


def seed_teryt(db: Session) -> None:
    db.add_all(
        [
            Voivodeship(code=WOJ, name="MAZOWIECKIE"),
            Voivodeship(code=WOJ_2, name="MAŁOPOLSKIE"),
        ]
    )
    db.flush()
    db.add_all(
        [
            District(code=POW, name="Warszawa", voivodeship_code=WOJ),
            District(code=POW_2, name="Kraków", voivodeship_code=WOJ_2),
        ]
    )
    db.flush()
    db.add_all(
        [
            Community(code=GMI, name="Warszawa", type="gmina miejska", district_code=POW),
            Community(code=GMI_2, name="Kraków", type="gmina miejska", district_code=POW_2),
        ]
    )
    db.flush()
    db.add_all(
        [
            City(code=SIMC, name="Warszawa", community_code=GMI),
            City(code=SIMC_2, name="Kraków", community_code=GMI_2),
        ]
    )
    db.flush()
    db.add_all(
        [
            CityDistrict(code=DZIELNICA, name="Mokotów", city_code=SIMC),
            Street(code=ULICA, name="ul. Puławska", city_code=SIMC),
            Street(code=ULICA_2, name="ul. Floriańska", city_code=SIMC_2),
        ]
    )
    db.commit()


def seed_provider(db: Session, name: str = "Orange", technology: str = "FTTH", bandwidth: int = 1000) -> int:
    p = Provider(name=name, technology=technology, bandwidth=bandwidth)
    db.add(p)
    db.commit()
    return int(p.id)


def building_cmd(provider_id: int, /, **overrides: Any) -> Dict[str, Any]:
    cmd: Dict[str, Any] = {
        "voivodeship_code": WOJ,
        "district_code": POW,
        "community_code": GMI,
        "city_code": SIMC,
        "city_district_code": DZIELNICA,
        "street_code": ULICA,
        "building_number": "12A",
        "post_code": "02-512",
        "location": {"type": "Point", "coordinates": list(WARSAW)},
        "provider_id": provider_id,
    }
    cmd.update(overrides)
    return cmd
