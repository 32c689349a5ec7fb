# teryt_registry/buildings/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, StringConstraints, field_validator

from teryt_registry.db.models.buildings import Building
from teryt_registry.services.geo.bounds import point_from_geojson, point_to_geojson
from teryt_registry.teryt.utils.normalize import blank_to_none, normalize_building_no

VoivodeshipCode = Annotated[StrictStr, StringConstraints(pattern=r"^[0-9]{2}$")]
DistrictCode = Annotated[StrictStr, StringConstraints(pattern=r"^[0-9]{4}$")]
CommunityCode = Annotated[StrictStr, StringConstraints(pattern=r"^[0-9]{7}$")]
CityCode = Annotated[StrictStr, StringConstraints(pattern=r"^[0-9]{7}$")]
CityDistrictCode = Annotated[StrictStr, StringConstraints(pattern=r"^[0-9]{7}$")]
StreetCode = Annotated[StrictStr, StringConstraints(pattern=r"^[0-9]{5}$")]
PostCode = Annotated[StrictStr, StringConstraints(pattern=r"^[0-9]{2}-[0-9]{3}$")]


class GeoPointIn(BaseModel):
    """GeoJSON Point: coordinates = [longitude, latitude] (w tej kolejności!)."""

    type: Literal["Point"]
    coordinates: List[float] = Field(min_length=2, max_length=2)


class GeoPointOut(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: List[float]


class BuildingCommandIn(BaseModel):
    """Create / update (PUT = pełna podmiana)."""

    voivodeship_code: VoivodeshipCode
    district_code: DistrictCode
    community_code: CommunityCode
    city_code: CityCode
    city_district_code: Optional[CityDistrictCode] = None
    street_code: Optional[StreetCode] = None

    building_number: StrictStr = Field(min_length=1, max_length=32)
    post_code: Optional[PostCode] = None

    location: GeoPointIn
    provider_id: StrictInt = Field(gt=0)

    @field_validator("city_district_code", "street_code", "post_code", mode="before")
    @classmethod
    def _blank_optional(cls, v):
        return blank_to_none(v)

    @field_validator("building_number")
    @classmethod
    def _building_number_not_blank(cls, v: str) -> str:
        if not normalize_building_no(v):
            raise ValueError("building_number nie może być pusty")
        return v

    @property
    def point(self) -> Tuple[float, float]:
        """(lon, lat) w kolejności GeoJSON."""
        return point_from_geojson(self.location.model_dump())

    @property
    def longitude(self) -> float:
        return self.point[0]

    @property
    def latitude(self) -> float:
        return self.point[1]


class BuildingListQueryIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=100, alias="pageSize")

    voivodeship_code: Optional[VoivodeshipCode] = None
    district_code: Optional[DistrictCode] = None
    community_code: Optional[CommunityCode] = None
    city_code: Optional[CityCode] = None
    city_district_code: Optional[CityDistrictCode] = None
    street_code: Optional[StreetCode] = None
    provider_id: Optional[int] = Field(default=None, gt=0)
    status: Optional[Literal["active", "deleted"]] = None


class BuildingOut(BaseModel):
    id: UUID

    voivodeship_code: str
    district_code: str
    community_code: str
    city_code: str
    city_district_code: Optional[str] = None
    street_code: Optional[str] = None

    voivodeship_name: str
    district_name: str
    community_name: str
    city_name: str
    city_district_name: Optional[str] = None
    street_name: Optional[str] = None

    building_number: str
    post_code: Optional[str] = None
    location: GeoPointOut

    provider_id: int
    provider_name: Optional[str] = None

    status: str
    created_by: str
    updated_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, b: Building) -> "BuildingOut":
        return cls(
            id=b.id,
            voivodeship_code=b.voivodeship_code,
            district_code=b.district_code,
            community_code=b.community_code,
            city_code=b.city_code,
            city_district_code=b.city_district_code,
            street_code=b.street_code,
            voivodeship_name=b.voivodeship_name,
            district_name=b.district_name,
            community_name=b.community_name,
            city_name=b.city_name,
            city_district_name=b.city_district_name,
            street_name=b.street_name,
            building_number=b.building_number,
            post_code=b.post_code,
            location=GeoPointOut(**point_to_geojson(b.location)),
            provider_id=int(b.provider_id),
            provider_name=getattr(b.provider, "name", None),
            status=str(b.status),
            created_by=b.created_by,
            updated_by=b.updated_by,
            created_at=b.created_at,
            updated_at=b.updated_at,
        )


class BuildingPageOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: List[BuildingOut]
    page: int
    page_size: int = Field(alias="pageSize")
    total: int
