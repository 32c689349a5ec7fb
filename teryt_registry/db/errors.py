# teryt_registry/db/errors.py
from __future__ import annotations

from sqlalchemy.exc import IntegrityError

# SQLSTATE (Postgres)
_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"


def _sqlstate(e: IntegrityError) -> str | None:
    orig = getattr(e, "orig", None)
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_unique_violation(e: IntegrityError) -> bool:
    state = _sqlstate(e)
    if state:
        return state == _UNIQUE_VIOLATION
    # SQLite nie ma SQLSTATE, zostaje treść komunikatu
    return "UNIQUE constraint failed" in str(getattr(e, "orig", e))


def is_foreign_key_violation(e: IntegrityError) -> bool:
    state = _sqlstate(e)
    if state:
        return state == _FOREIGN_KEY_VIOLATION
    return "FOREIGN KEY constraint failed" in str(getattr(e, "orig", e))
