# teryt_registry/db/types/pg_point.py
from __future__ import annotations

from typing import Any, Optional, Tuple

from sqlalchemy.types import UserDefinedType


def format_point(value: Tuple[float, float]) -> str:
    lon, lat = value
    # repr(float) = najkrótszy zapis, który wraca do identycznego float (bez utraty precyzji)
    return f"({float(lon)!r},{float(lat)!r})"


def parse_point(raw: Any) -> Optional[Tuple[float, float]]:
    if raw is None:
        return None
    if isinstance(raw, (tuple, list)):
        lon, lat = raw
        return float(lon), float(lat)
    s = str(raw).strip().lstrip("(").rstrip(")")
    lon_s, lat_s = s.split(",", 1)
    return float(lon_s), float(lat_s)


class PGPoint(UserDefinedType):
    """PostgreSQL native POINT type.

    Stored as POINT (x,y) = (lon,lat). Po stronie Pythona zawsze krotka (lon, lat).
    Na SQLite (testy) kolumna trzyma ten sam tekst "(x,y)".
    """
    cache_ok = True

    def get_col_spec(self, **kw) -> str:
        return "POINT"

    def bind_processor(self, dialect):
        def process(value):
            if value is None:
                return None
            return format_point(value)

        return process

    def result_processor(self, dialect, coltype):
        def process(value):
            return parse_point(value)

        return process
