from .boundary import service_boundary
from .domains import (
    Conflict,
    DomainError,
    Forbidden,
    HierarchyError,
    Internal,
    NonFiniteCoordinate,
    NotFound,
    OutOfRange,
    PageOutOfRange,
    ReferencedByBuilding,
    Unauthorized,
    UnresolvedReference,
    ValidationError,
)

__all__ = [
    "DomainError",
    "ValidationError",
    "OutOfRange",
    "NonFiniteCoordinate",
    "Unauthorized",
    "Forbidden",
    "NotFound",
    "PageOutOfRange",
    "UnresolvedReference",
    "HierarchyError",
    "Conflict",
    "ReferencedByBuilding",
    "Internal",
    "service_boundary",
]
