# teryt_registry/users/identity/rbac/policy_engine.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from teryt_registry.shared.errors import Forbidden, Unauthorized
from teryt_registry.users.identity.principal import Principal
from teryt_registry.users.identity.rbac.actions import MIN_ROLE, Action


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str
    # "ok" | "unauthorized" | "forbidden"
    kind: str = "ok"


def authorize(principal: Optional[Principal], action: Action) -> Decision:
    # 1) brak principala = "zaloguj się" (401), nie "brak uprawnień" (403)
    if principal is None:
        return Decision(False, "brak uwierzytelnienia", kind="unauthorized")

    # 2) porządek ról READ < WRITE < ADMIN
    required = MIN_ROLE[action]
    if principal.role.at_least(required):
        return Decision(True, "ok")

    return Decision(False, f"brak uprawnienia: {action.value} (wymagana rola {required.value})", kind="forbidden")


def ensure_allowed(principal: Optional[Principal], action: Action) -> Principal:
    decision = authorize(principal, action)
    if decision.allowed and principal is not None:
        return principal
    if decision.kind == "unauthorized":
        raise Unauthorized(message="Użytkownik nie jest uwierzytelniony.", details={"action": action.value})
    raise Forbidden(
        message=decision.reason,
        details={
            "action": action.value,
            "required_role": MIN_ROLE[action].value,
            "role": principal.role.value if principal else None,
        },
    )
