from __future__ import annotations


def normalize_building_no(raw: str) -> str:
    """Klucz unikalności numeru budynku: trim + wielkie litery, tak żeby 12a i 12A były jednym budynkiem.

    Spacje i myślniki w środku zostają: "1-3" i "13" to różne adresy.
    Tylko do klucza unikalności; w rekordzie zostaje numer dokładnie taki, jak podano.
    """
    if raw is None:
        return ""
    return str(raw).strip().upper()


def blank_to_none(raw: object) -> object:
    if isinstance(raw, str) and not raw.strip():
        return None
    return raw
