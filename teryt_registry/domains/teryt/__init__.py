from .enums import Level
from .repositories import AdministrativeUnit, TerytRepository

__all__ = [
    "Level",
    "AdministrativeUnit",
    "TerytRepository",
]
