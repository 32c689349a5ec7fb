from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from teryt_registry.domains.teryt.enums import OPTIONAL_LEVELS, VALIDATION_ORDER, Level
from teryt_registry.domains.teryt.repositories import AdministrativeUnit, TerytRepository
from teryt_registry.shared.errors import HierarchyError

REASON_NOT_FOUND = "code not found"
REASON_PARENT_MISMATCH = "does not belong to parent"


@dataclass(frozen=True)
class HierarchyCodes:
    """Kandydat na ścieżkę w TERYT. city_district / street opcjonalne."""

    voivodeship: str
    district: str
    community: str
    city: str
    city_district: Optional[str] = None
    street: Optional[str] = None

    def code_for(self, level: Level) -> Optional[str]:
        return getattr(self, level.value)


@dataclass(frozen=True)
class ResolvedChain:
    units: dict[Level, AdministrativeUnit]

    def name_for(self, level: Level) -> Optional[str]:
        u = self.units.get(level)
        return u.name if u else None


class HierarchyValidator:
    """Dowodzi, że kody tworzą jedną spójną ścieżkę woj -> pow -> gmi -> miejscowość (-> dzielnica/ulica).

    Idziemy od najbardziej szczegółowego podanego poziomu w górę
    (ulica, dzielnica, miejscowość, gmina, powiat, województwo). Na każdym poziomie:
    - brak kodu w słowniku -> HierarchyError(level, "code not found")
    - parent_code != kod podany poziom wyżej -> HierarchyError(level, "does not belong to parent")

    Pierwszy błąd kończy walidację. Kolejność jest kontraktem: te same dane
    wejściowe zawsze dają ten sam błąd. Puste poziomy opcjonalne pomijamy i niczego nie zgadujemy.
    """

    def __init__(self, teryt: TerytRepository) -> None:
        self._teryt = teryt

    def validate(self, codes: HierarchyCodes) -> ResolvedChain:
        resolved: dict[Level, AdministrativeUnit] = {}

        for level in VALIDATION_ORDER:
            code = codes.code_for(level)
            if not code:
                if level in OPTIONAL_LEVELS:
                    continue
                # wymagane poziomy pilnuje walidacja strukturalna; tu tylko asekuracja kontraktu
                raise HierarchyError(
                    message=f"Brak kodu poziomu {level.value}.",
                    details={"level": level.value, "code": code, "reason": REASON_NOT_FOUND},
                )

            unit = self._teryt.find_by_code(level, code)
            if unit is None:
                raise HierarchyError(
                    message=f"{level.value}: kod {code} nie istnieje w TERYT.",
                    details={"level": level.value, "code": code, "reason": REASON_NOT_FOUND},
                )

            parent_level = level.parent
            if parent_level is not None:
                expected_parent = codes.code_for(parent_level)
                if unit.parent_code != expected_parent:
                    raise HierarchyError(
                        message=(
                            f"{level.value}: kod {code} nie należy do {parent_level.value} {expected_parent} "
                            f"(rodzic w TERYT: {unit.parent_code})."
                        ),
                        details={
                            "level": level.value,
                            "code": code,
                            "reason": REASON_PARENT_MISMATCH,
                            "parent_level": parent_level.value,
                            "expected_parent_code": expected_parent,
                            "actual_parent_code": unit.parent_code,
                        },
                    )

            resolved[level] = unit

        return ResolvedChain(units=resolved)
