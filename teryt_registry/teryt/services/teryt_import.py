from __future__ import annotations

import csv
import io
import logging
import re
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from teryt_registry.domains.teryt.enums import CODE_PATTERNS, Level
from teryt_registry.domains.teryt.repositories import TerytRepository, model_for, parent_column_for

logger = logging.getLogger(__name__)

BATCH_SIZE = 1000


class TerytImportError(RuntimeError):
    """Plik nie nadaje się do importu (brak nagłówka, pusty ZIP, nieznany poziom)."""


@dataclass
class ImportResult:
    level: Level
    rows_seen: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    skip_reasons: Dict[str, int] = field(default_factory=dict)
    dry_run: bool = False

    def skip(self, reason: str) -> None:
        self.skipped += 1
        self.skip_reasons[reason] = self.skip_reasons.get(reason, 0) + 1


@dataclass(frozen=True)
class UnitRow:
    code: str
    name: str
    parent_code: Optional[str]
    type: Optional[str] = None


# --------------------------------------------------------------------- reading


def norm_key(s: str) -> str:
    return (s or "").strip().lower().replace(" ", "_")


def get_any(row: Dict[str, Any], keys: List[str]) -> Optional[str]:
    for k in keys:
        v = row.get(k)
        if v is None:
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return str(v).strip()
    return None


def detect_delimiter(sample: str) -> str:
    semi = sample.count(";")
    comma = sample.count(",")
    tab = sample.count("\t")
    if tab > max(semi, comma):
        return "\t"
    return ";" if semi >= comma else ","


def _rows_from_text(text_io: io.TextIOBase, delimiter: str) -> Iterable[Dict[str, Any]]:
    reader = csv.DictReader(text_io, delimiter=delimiter)
    if not reader.fieldnames:
        raise TerytImportError("Plik TERYT nie ma nagłówka.")
    logger.debug("teryt headers: %s", reader.fieldnames)
    for row in reader:
        yield {norm_key(k): (v.strip() if isinstance(v, str) else v) for k, v in row.items() if k is not None}


def iter_rows_from_file_path(path: Path) -> Iterable[Dict[str, Any]]:
    """Streamuje wiersze z CSV albo pierwszego CSV w ZIP (bez ładowania całości do RAM).

    Klucze nagłówka znormalizowane: lower, spacje -> '_'. BOM zjadany przez utf-8-sig.
    """
    if not path.exists():
        raise TerytImportError(f"Plik nie istnieje: {path}")

    if path.suffix.lower() == ".zip":
        with zipfile.ZipFile(path) as zf:
            names = [n for n in zf.namelist() if not n.endswith("/")]
        if not names:
            raise TerytImportError("ZIP jest pusty.")
        cand = next((n for n in names if Path(n).suffix.lower() in (".csv", ".tsv", ".txt")), names[0])

        def rows_zip() -> Iterable[Dict[str, Any]]:
            with zipfile.ZipFile(path) as zf2:
                with zf2.open(cand) as bf:
                    head = io.TextIOWrapper(bf, encoding="utf-8-sig", errors="replace", newline="").read(4096)
                # ZIP bez seek: drugi open pod DictReader
                with zf2.open(cand) as bf2:
                    txt = io.TextIOWrapper(bf2, encoding="utf-8-sig", errors="replace", newline="")
                    yield from _rows_from_text(txt, detect_delimiter(head))

        return rows_zip()

    def rows_plain() -> Iterable[Dict[str, Any]]:
        with path.open("r", encoding="utf-8-sig", errors="replace", newline="") as f:
            head = f.read(4096)
            f.seek(0)
            yield from _rows_from_text(f, detect_delimiter(head))

    return rows_plain()


# ------------------------------------------------------------------ row mapping
#
# Dwa formaty wejścia:
# - proste CSV: code;name;parent_code (+ type dla gmin)
# - oficjalne pliki GUS: TERC (woj/pow/gmi/rodz), SIMC (sym/sympod), ULIC (sym/sym_ul)


def _terc(row: Dict[str, Any], *parts: str) -> Optional[str]:
    vals = [get_any(row, [p]) for p in parts]
    if any(v is None for v in vals):
        return None
    return "".join(vals)  # type: ignore[arg-type]


def _map_voivodeship(row: Dict[str, Any]) -> Optional[UnitRow]:
    if "woj" in row:
        if get_any(row, ["pow"]):
            return None
        code = _terc(row, "woj")
    else:
        code = get_any(row, ["code", "kod"])
    name = get_any(row, ["name", "nazwa"])
    if code is None or name is None:
        return None
    return UnitRow(code=code, name=name, parent_code=None)


def _map_district(row: Dict[str, Any]) -> Optional[UnitRow]:
    if "woj" in row:
        if not get_any(row, ["pow"]) or get_any(row, ["gmi"]):
            return None
        code, parent = _terc(row, "woj", "pow"), _terc(row, "woj")
    else:
        code = get_any(row, ["code", "kod"])
        parent = get_any(row, ["parent_code", "voivodeship_code"])
    name = get_any(row, ["name", "nazwa"])
    if code is None or name is None:
        return None
    return UnitRow(code=code, name=name, parent_code=parent)


def _map_community(row: Dict[str, Any]) -> Optional[UnitRow]:
    if "woj" in row:
        if not get_any(row, ["gmi"]):
            return None
        code, parent = _terc(row, "woj", "pow", "gmi", "rodz"), _terc(row, "woj", "pow")
        kind = get_any(row, ["nazwa_dod"])
    else:
        code = get_any(row, ["code", "kod"])
        parent = get_any(row, ["parent_code", "district_code"])
        kind = get_any(row, ["type", "rodzaj"])
    name = get_any(row, ["name", "nazwa"])
    if code is None or name is None:
        return None
    return UnitRow(code=code, name=name, parent_code=parent, type=kind)


def _map_city(row: Dict[str, Any]) -> Optional[UnitRow]:
    if "sym" in row:
        sym, sympod = get_any(row, ["sym"]), get_any(row, ["sympod"])
        # SIMC: miejscowość podstawowa ma sympod == sym
        if sympod and sympod != sym:
            return None
        code, parent = sym, _terc(row, "woj", "pow", "gmi", "rodz_gmi")
    else:
        code = get_any(row, ["code", "kod"])
        parent = get_any(row, ["parent_code", "community_code"])
    name = get_any(row, ["name", "nazwa"])
    if code is None or name is None:
        return None
    return UnitRow(code=code, name=name, parent_code=parent)


def _map_city_district(row: Dict[str, Any]) -> Optional[UnitRow]:
    if "sym" in row:
        sym, sympod = get_any(row, ["sym"]), get_any(row, ["sympod"])
        if not sympod or sympod == sym:
            return None
        code, parent = sym, sympod
    else:
        code = get_any(row, ["code", "kod"])
        parent = get_any(row, ["parent_code", "city_code"])
    name = get_any(row, ["name", "nazwa"])
    if code is None or name is None:
        return None
    return UnitRow(code=code, name=name, parent_code=parent)


def _map_street(row: Dict[str, Any]) -> Optional[UnitRow]:
    if "sym_ul" in row:
        code, parent = get_any(row, ["sym_ul"]), get_any(row, ["sym"])
        # ULIC: cecha (ul./al./pl.) + nazwa_2 + nazwa_1
        parts = [get_any(row, [k]) for k in ("cecha", "nazwa_2", "nazwa_1")]
        name = " ".join(p for p in parts if p) or None
    else:
        code = get_any(row, ["code", "kod"])
        parent = get_any(row, ["parent_code", "city_code"])
        name = get_any(row, ["name", "nazwa"])
    if code is None or name is None:
        return None
    return UnitRow(code=code, name=name, parent_code=parent)


_MAPPERS: Dict[Level, Callable[[Dict[str, Any]], Optional[UnitRow]]] = {
    Level.VOIVODESHIP: _map_voivodeship,
    Level.DISTRICT: _map_district,
    Level.COMMUNITY: _map_community,
    Level.CITY: _map_city,
    Level.CITY_DISTRICT: _map_city_district,
    Level.STREET: _map_street,
}


def map_row(level: Level, row: Dict[str, Any]) -> Optional[UnitRow]:
    """Wiersz pliku -> UnitRow dla danego poziomu; None = wiersz innego poziomu albo niepełny."""
    return _MAPPERS[level](row)


# --------------------------------------------------------------------- upsert


class TerytImporter:
    """Ładuje jeden poziom TERYT na raz (rodzice muszą być już w bazie).

    Upsert po kodzie: nowy kod -> insert, znany kod -> aktualizacja nazwy/rodzica.
    Wiersze ze złym formatem kodu albo nieistniejącym rodzicem są pomijane i liczone.
    Przy dry_run wszystko jest sprawdzane, ale na końcu rollback.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self._teryt = TerytRepository(db)
        self._parent_cache: Dict[str, bool] = {}

    def _parent_exists(self, level: Level, code: str) -> bool:
        hit = self._parent_cache.get(code)
        if hit is None:
            hit = self._teryt.exists(level, code)
            self._parent_cache[code] = hit
        return hit

    def _validate(self, level: Level, unit: UnitRow, seen: Dict[str, Optional[str]]) -> Optional[str]:
        if not re.match(CODE_PATTERNS[level], unit.code):
            return "bad_code_format"

        parent_level = level.parent
        if parent_level is not None:
            if not unit.parent_code:
                return "missing_parent_code"
            if not re.match(CODE_PATTERNS[parent_level], unit.parent_code):
                return "bad_parent_code_format"
            if not self._parent_exists(parent_level, unit.parent_code):
                return "parent_not_found"

        if unit.code in seen and seen[unit.code] != unit.parent_code:
            # ten sam kod pod innym rodzicem w jednym pliku: pierwszy wygrywa
            return "duplicate_code_other_parent"
        return None

    def _apply(self, level: Level, unit: UnitRow, result: ImportResult) -> None:
        model = model_for(level)
        parent_attr = parent_column_for(level)

        values: Dict[str, Any] = {"name": unit.name}
        if parent_attr:
            values[parent_attr] = unit.parent_code
        if level == Level.COMMUNITY:
            values["type"] = unit.type

        obj = self.db.get(model, unit.code)
        if obj is None:
            self.db.add(model(code=unit.code, **values))
            result.inserted += 1
            return

        changed = False
        for k, v in values.items():
            if getattr(obj, k) != v:
                setattr(obj, k, v)
                changed = True
        if changed:
            result.updated += 1

    def run(self, level: Level, rows: Iterable[Dict[str, Any]], *, dry_run: bool = False) -> ImportResult:
        result = ImportResult(level=level, dry_run=dry_run)
        seen: Dict[str, Optional[str]] = {}
        pending = 0

        try:
            for row in rows:
                result.rows_seen += 1
                unit = map_row(level, row)
                if unit is None:
                    result.skip("not_this_level")
                    continue

                reason = self._validate(level, unit, seen)
                if reason:
                    result.skip(reason)
                    continue
                if unit.code in seen:
                    result.skip("duplicate_code")
                    continue

                seen[unit.code] = unit.parent_code
                self._apply(level, unit, result)
                pending += 1
                if pending >= BATCH_SIZE:
                    self.db.flush()
                    pending = 0

            self.db.flush()
            if dry_run:
                self.db.rollback()
            else:
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "teryt import level=%s rows=%s inserted=%s updated=%s skipped=%s dry_run=%s reasons=%s",
            level.value,
            result.rows_seen,
            result.inserted,
            result.updated,
            result.skipped,
            dry_run,
            result.skip_reasons,
        )
        return result


def import_file(db: Session, level: Level, path: Path, *, dry_run: bool = False) -> ImportResult:
    return TerytImporter(db).run(level, iter_rows_from_file_path(path), dry_run=dry_run)


def level_from_arg(raw: str) -> Level:
    """CLI: akceptuje 'city' albo 'cities'."""
    s = (raw or "").strip().lower()
    for lv in Level:
        if s in (lv.value, lv.resource):
            return lv
    raise TerytImportError(f"Nieznany poziom TERYT: {raw!r} (dozwolone: {', '.join(lv.value for lv in Level)})")
