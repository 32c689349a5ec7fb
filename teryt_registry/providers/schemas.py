# teryt_registry/providers/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator

from teryt_registry.db.models.providers import Provider

BANDWIDTH_MAX = 1_000_000


def _trimmed(v):
    return v.strip() if isinstance(v, str) else v


class ProviderCreateIn(BaseModel):
    name: StrictStr = Field(min_length=1, max_length=255)
    technology: StrictStr = Field(min_length=1, max_length=100)
    # Mbps
    bandwidth: StrictInt = Field(gt=0, le=BANDWIDTH_MAX)

    @field_validator("name", "technology", mode="before")
    @classmethod
    def _strip(cls, v):
        return _trimmed(v)


class ProviderUpdateIn(BaseModel):
    """PUT /providers/{id}: podane pola nadpisują, pominięte zostają bez zmian."""

    name: Optional[StrictStr] = Field(default=None, min_length=1, max_length=255)
    technology: Optional[StrictStr] = Field(default=None, min_length=1, max_length=100)
    bandwidth: Optional[StrictInt] = Field(default=None, gt=0, le=BANDWIDTH_MAX)

    @field_validator("name", "technology", mode="before")
    @classmethod
    def _strip(cls, v):
        return _trimmed(v)


class ProviderListQueryIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=100, alias="pageSize")
    search: Optional[str] = Field(default=None, max_length=255)
    technology: Optional[str] = Field(default=None, max_length=100)

    @field_validator("search", "technology", mode="before")
    @classmethod
    def _blank(cls, v):
        v = _trimmed(v)
        return v or None


class ProviderOut(BaseModel):
    id: int
    name: str
    technology: str
    bandwidth: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, p: Provider) -> "ProviderOut":
        return cls(
            id=int(p.id),
            name=p.name,
            technology=p.technology,
            bandwidth=int(p.bandwidth),
            created_at=p.created_at,
            updated_at=p.updated_at,
        )


class ProviderPageOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: List[ProviderOut]
    page: int
    page_size: int = Field(alias="pageSize")
    total: int
