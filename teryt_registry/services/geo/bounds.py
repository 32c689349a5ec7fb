from __future__ import annotations

import math
from typing import Any, Tuple

from teryt_registry.shared.errors import NonFiniteCoordinate, OutOfRange, ValidationError

# Prostokąt obejmujący Polskę: luźniejszy niż granice, łapie grube błędy wprowadzania
# (np. zamienione lat/lon dla punktu spoza wspólnego zakresu).
LATITUDE_MIN = 49.0
LATITUDE_MAX = 54.8
LONGITUDE_MIN = 14.1
LONGITUDE_MAX = 24.1


def _check_axis(field: str, value: float, lo: float, hi: float) -> None:
    if value < lo:
        raise OutOfRange(
            message=f"{field}={value} poza zakresem Polski ({lo}..{hi}).",
            details={"field": field, "bound": "min", "limit": lo, "value": value},
        )
    if value > hi:
        raise OutOfRange(
            message=f"{field}={value} poza zakresem Polski ({lo}..{hi}).",
            details={"field": field, "bound": "max", "limit": hi, "value": value},
        )


def check_bounds(lat: float, lon: float) -> None:
    """Czysty test zakresu, bez I/O. Najpierw skończoność obu osi, potem zakresy (lat, lon)."""
    for field, value in (("latitude", lat), ("longitude", lon)):
        if not math.isfinite(value):
            raise NonFiniteCoordinate(
                message=f"{field} musi być skończoną liczbą.",
                details={"field": field},
            )

    _check_axis("latitude", lat, LATITUDE_MIN, LATITUDE_MAX)
    _check_axis("longitude", lon, LONGITUDE_MIN, LONGITUDE_MAX)


def point_from_geojson(geo: Any) -> Tuple[float, float]:
    """GeoJSON Point -> (lon, lat). Kolejność GeoJSON: [longitude, latitude]."""
    if not isinstance(geo, dict) or geo.get("type") != "Point":
        raise ValidationError(message="location musi być GeoJSON Point.", details={"field": "location"})
    coords = geo.get("coordinates")
    if not isinstance(coords, (list, tuple)) or len(coords) != 2:
        raise ValidationError(
            message="location.coordinates musi mieć dokładnie 2 elementy [lon, lat].",
            details={"field": "location.coordinates"},
        )
    lon, lat = coords
    return float(lon), float(lat)


def point_to_geojson(point: Tuple[float, float]) -> dict[str, Any]:
    lon, lat = point
    return {"type": "Point", "coordinates": [float(lon), float(lat)]}
