from __future__ import annotations

from enum import StrEnum


class BuildingStatus(StrEnum):
    ACTIVE = "active"
    DELETED = "deleted"
