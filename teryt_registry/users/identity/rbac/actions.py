# teryt_registry/users/identity/rbac/actions.py
from __future__ import annotations
from enum import Enum

from teryt_registry.users.identity.rbac.roles import Role


class Action(str, Enum):
    # Buildings
    BUILDINGS_READ = "buildings.read"
    BUILDINGS_CREATE = "buildings.create"
    BUILDINGS_UPDATE = "buildings.update"
    BUILDINGS_DELETE = "buildings.delete"

    # Providers
    PROVIDERS_READ = "providers.read"
    PROVIDERS_CREATE = "providers.create"
    PROVIDERS_UPDATE = "providers.update"
    PROVIDERS_DELETE = "providers.delete"

    # TERYT (słowniki tylko do odczytu)
    TERYT_READ = "teryt.read"


# minimalna rola per akcja
MIN_ROLE: dict[Action, Role] = {
    Action.BUILDINGS_READ: Role.READ,
    Action.BUILDINGS_CREATE: Role.WRITE,
    Action.BUILDINGS_UPDATE: Role.WRITE,
    # usuwanie budynku tak samo restrykcyjne jak usuwanie dostawcy
    Action.BUILDINGS_DELETE: Role.ADMIN,
    Action.PROVIDERS_READ: Role.READ,
    Action.PROVIDERS_CREATE: Role.WRITE,
    Action.PROVIDERS_UPDATE: Role.WRITE,
    Action.PROVIDERS_DELETE: Role.ADMIN,
    Action.TERYT_READ: Role.READ,
}
