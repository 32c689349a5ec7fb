# teryt_registry/users/identity/rbac/roles.py
from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    READ = "READ"
    WRITE = "WRITE"
    ADMIN = "ADMIN"

    @property
    def rank(self) -> int:
        return _RANK[self]

    def at_least(self, other: "Role") -> bool:
        return self.rank >= other.rank

    @classmethod
    def parse(cls, raw: object) -> "Role | None":
        s = str(raw or "").strip().upper()
        try:
            return cls(s)
        except ValueError:
            return None


# porządek całkowity READ < WRITE < ADMIN
_RANK: dict[Role, int] = {
    Role.READ: 0,
    Role.WRITE: 1,
    Role.ADMIN: 2,
}
