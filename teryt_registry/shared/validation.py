from __future__ import annotations

from typing import Any, Mapping, Type, TypeVar

import pydantic
from pydantic import BaseModel

from teryt_registry.shared.errors import ValidationError

M = TypeVar("M", bound=BaseModel)


def _field_path(loc: tuple[Any, ...]) -> str:
    return ".".join(str(p) for p in loc) or "body"


def parse_command(model: Type[M], raw: Mapping[str, Any] | M | None) -> M:
    """Walidacja strukturalna (kształt, typy, formaty) -> nasz ValidationError.

    Pierwszy błąd wskazuje pole (`details.field`), reszta idzie w `details.errors`,
    żeby klient mógł podświetlić dokładnie to, co jest źle.
    """
    if isinstance(raw, model):
        return raw
    if raw is None or not isinstance(raw, Mapping):
        raise ValidationError(message="Body musi być obiektem JSON.", details={"field": "body"})

    try:
        return model.model_validate(dict(raw))
    except pydantic.ValidationError as e:
        errors = [
            {"field": _field_path(tuple(err.get("loc", ()))), "message": str(err.get("msg", ""))}
            for err in e.errors()
        ]
        first = errors[0] if errors else {"field": "body", "message": "invalid"}
        raise ValidationError(
            message=f"Nieprawidłowe pole {first['field']}: {first['message']}",
            details={"field": first["field"], "errors": errors},
        ) from e
