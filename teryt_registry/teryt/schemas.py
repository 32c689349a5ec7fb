# teryt_registry/teryt/schemas.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from teryt_registry.domains.teryt.repositories import AdministrativeUnit


class TerytListQueryIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=100, alias="pageSize")
    parent_code: Optional[str] = Field(default=None, pattern=r"^[0-9]{2,7}$")
    search: Optional[str] = Field(default=None, max_length=100)

    @field_validator("parent_code", "search", mode="before")
    @classmethod
    def _blank(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v or None


class TerytUnitOut(BaseModel):
    level: str
    code: str
    name: str
    parent_code: Optional[str] = None

    @classmethod
    def from_unit(cls, u: AdministrativeUnit) -> "TerytUnitOut":
        return cls(level=u.level.value, code=u.code, name=u.name, parent_code=u.parent_code)


class TerytPageOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: List[TerytUnitOut]
    page: int
    page_size: int = Field(alias="pageSize")
    total: int
