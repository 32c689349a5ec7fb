from __future__ import annotations

from typing import List

from fastapi import APIRouter

from teryt_registry.buildings.api.buildings_routes import router as buildings_router


def get_routers() -> List[APIRouter]:
    return [buildings_router]
