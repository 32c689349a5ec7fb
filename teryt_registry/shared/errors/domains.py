from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass(frozen=True)
class DomainError(Exception):
    """Bazowy błąd domenowy (services/use-cases).

    Każdy rodzaj ma stały `code` (maszynowo sprawdzalny) i `http_status`,
    który warstwa HTTP tłumaczy 1:1 na odpowiedź.
    """

    message: str
    code: str = "domain_error"
    details: dict[str, Any] | None = None

    http_status: ClassVar[int] = 500

    def __str__(self) -> str:
        return self.message

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": dict(self.details or {})}


@dataclass(frozen=True)
class ValidationError(DomainError):
    code: str = "validation_error"

    http_status: ClassVar[int] = 400


@dataclass(frozen=True)
class OutOfRange(ValidationError):
    code: str = "out_of_range"


@dataclass(frozen=True)
class NonFiniteCoordinate(ValidationError):
    code: str = "not_finite"


@dataclass(frozen=True)
class Unauthorized(DomainError):
    code: str = "unauthorized"

    http_status: ClassVar[int] = 401


@dataclass(frozen=True)
class Forbidden(DomainError):
    code: str = "forbidden"

    http_status: ClassVar[int] = 403


@dataclass(frozen=True)
class NotFound(DomainError):
    code: str = "not_found"

    http_status: ClassVar[int] = 404


@dataclass(frozen=True)
class PageOutOfRange(NotFound):
    code: str = "page_out_of_range"


@dataclass(frozen=True)
class UnresolvedReference(DomainError):
    code: str = "unresolved_reference"

    http_status: ClassVar[int] = 404


@dataclass(frozen=True)
class HierarchyError(UnresolvedReference):
    """Zerwane ogniwo łańcucha TERYT; details: level, code, reason."""

    code: str = "hierarchy_error"

    @property
    def level(self) -> str | None:
        return (self.details or {}).get("level")

    @property
    def reason(self) -> str | None:
        return (self.details or {}).get("reason")


@dataclass(frozen=True)
class Conflict(DomainError):
    code: str = "conflict"

    http_status: ClassVar[int] = 409


@dataclass(frozen=True)
class ReferencedByBuilding(Conflict):
    code: str = "referenced_by_building"


@dataclass(frozen=True)
class Internal(DomainError):
    code: str = "internal"

    http_status: ClassVar[int] = 500
