# teryt_registry/users/identity/rbac/dependencies.py
from __future__ import annotations

from typing import Optional

from fastapi import Request

from teryt_registry.app.config import get_settings
from teryt_registry.shared.request_context import bind_principal
from teryt_registry.users.identity.principal import Principal, decode_principal


async def current_principal(request: Request) -> Optional[Principal]:
    """FastAPI dependency: Principal z `Authorization: Bearer <jwt>` albo None.

    Nie rzucamy tutaj 401: o tym, czy operacja wymaga principala, decyduje
    bramka w serwisie (ensure_allowed).
    """
    auth = request.headers.get("authorization", "")
    if not auth.lower().startswith("bearer "):
        return None

    token = auth.split(" ", 1)[1].strip()
    if not token:
        return None

    settings = get_settings()
    principal = decode_principal(token, secret=settings.auth_jwt_secret, algorithm=settings.auth_jwt_alg)
    bind_principal(principal.id if principal else None)
    return principal
