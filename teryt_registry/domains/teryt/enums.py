from __future__ import annotations

from enum import StrEnum


class Level(StrEnum):
    VOIVODESHIP = "voivodeship"
    DISTRICT = "district"
    COMMUNITY = "community"
    CITY = "city"
    CITY_DISTRICT = "city_district"
    STREET = "street"

    @property
    def parent(self) -> "Level | None":
        return _PARENT[self]

    @property
    def resource(self) -> str:
        """Nazwa zasobu w API / tabeli (liczba mnoga)."""
        return _RESOURCE[self]

    @classmethod
    def from_resource(cls, resource: str) -> "Level | None":
        for level, name in _RESOURCE.items():
            if name == resource:
                return level
        return None


_PARENT: dict[Level, Level | None] = {
    Level.VOIVODESHIP: None,
    Level.DISTRICT: Level.VOIVODESHIP,
    Level.COMMUNITY: Level.DISTRICT,
    Level.CITY: Level.COMMUNITY,
    # dzielnica i ulica wiszą bezpośrednio pod miejscowością
    Level.CITY_DISTRICT: Level.CITY,
    Level.STREET: Level.CITY,
}

_RESOURCE: dict[Level, str] = {
    Level.VOIVODESHIP: "voivodeships",
    Level.DISTRICT: "districts",
    Level.COMMUNITY: "communities",
    Level.CITY: "cities",
    Level.CITY_DISTRICT: "city_districts",
    Level.STREET: "streets",
}

# Kolejność sprawdzania łańcucha: od najbardziej szczegółowego poziomu w górę.
# To jest kontrakt (powtarzalne komunikaty błędów), nie zmieniać bez powodu.
VALIDATION_ORDER: tuple[Level, ...] = (
    Level.STREET,
    Level.CITY_DISTRICT,
    Level.CITY,
    Level.COMMUNITY,
    Level.DISTRICT,
    Level.VOIVODESHIP,
)

OPTIONAL_LEVELS: frozenset[Level] = frozenset({Level.CITY_DISTRICT, Level.STREET})

# formaty kodów (stringi, wiodące zera mają znaczenie)
CODE_PATTERNS: dict[Level, str] = {
    Level.VOIVODESHIP: r"^[0-9]{2}$",
    Level.DISTRICT: r"^[0-9]{4}$",
    Level.COMMUNITY: r"^[0-9]{7}$",
    Level.CITY: r"^[0-9]{7}$",
    Level.CITY_DISTRICT: r"^[0-9]{7}$",
    Level.STREET: r"^[0-9]{5}$",
}
