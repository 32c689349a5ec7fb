#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from teryt_registry.app.config import get_settings
from teryt_registry.db.session import get_session_factory
from teryt_registry.shared.logging_setup import configure_logging
from teryt_registry.teryt.services.teryt_import import TerytImportError, import_file, level_from_arg


def _resolve_file(raw: str, import_dir: str) -> Path:
    p = Path(raw)
    if p.is_absolute() or p.exists():
        return p
    # względna nazwa bez pliku w cwd -> katalog importów z konfiguracji
    return Path(import_dir) / p


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Ładowanie słowników TERYT (jeden poziom na uruchomienie).")
    p.add_argument(
        "--level",
        required=True,
        help="voivodeship|district|community|city|city_district|street (albo nazwa zasobu, np. cities)",
    )
    p.add_argument("--file", required=True, help="CSV albo ZIP (TERC/SIMC/ULIC lub code;name;parent_code)")
    p.add_argument("--dry-run", action="store_true", help="sprawdź wszystko, nic nie zapisuj")
    args = p.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        level = level_from_arg(args.level)
        path = _resolve_file(args.file, settings.teryt_import_dir)
    except TerytImportError as e:
        print(str(e), file=sys.stderr)
        return 2

    db = get_session_factory()()
    try:
        res = import_file(db, level, path, dry_run=args.dry_run)
    except TerytImportError as e:
        print(f"Import TERYT FAILED: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print(
        f"{res.level.value}: rows={res.rows_seen} inserted={res.inserted} updated={res.updated} "
        f"skipped={res.skipped} {res.skip_reasons}" + (" (dry-run)" if res.dry_run else "")
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
