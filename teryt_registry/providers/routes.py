from __future__ import annotations

from typing import List

from fastapi import APIRouter

from teryt_registry.providers.api.providers_routes import router as providers_router


def get_routers() -> List[APIRouter]:
    return [providers_router]
