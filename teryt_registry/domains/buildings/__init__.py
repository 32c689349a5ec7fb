from .enums import BuildingStatus
from .repositories import (
    BuildingFilter,
    BuildingRepoError,
    BuildingRepository,
    DuplicateAddressError,
    MissingProviderError,
)

__all__ = [
    "BuildingStatus",
    "BuildingFilter",
    "BuildingRepository",
    "BuildingRepoError",
    "DuplicateAddressError",
    "MissingProviderError",
]
