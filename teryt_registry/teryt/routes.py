from __future__ import annotations

from typing import List

from fastapi import APIRouter

from teryt_registry.teryt.api.teryt_routes import router as teryt_router


def get_routers() -> List[APIRouter]:
    return [teryt_router]
