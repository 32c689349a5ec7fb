# teryt_registry/users/identity/principal.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from teryt_registry.users.identity.rbac.roles import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Uwierzytelniony wywołujący: {id, role}. Tożsamość dostarcza zewnętrzny IdP."""

    id: str
    role: Role


def principal_from_claims(claims: Dict[str, Any]) -> Optional[Principal]:
    sub = str(claims.get("sub") or "").strip()
    role = Role.parse(claims.get("role"))
    if not sub or role is None:
        return None
    return Principal(id=sub, role=role)


def decode_principal(token: str, *, secret: str, algorithm: str) -> Optional[Principal]:
    """Token -> Principal. Zły podpis, wygasły token, brak sub/role = brak principala."""
    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as e:
        logger.info("bearer token rejected: %s", e)
        return None
    return principal_from_claims(claims)
