import logging
from enum import Enum
from typing import Any, List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from models.geo import LatLng

logger = logging.getLogger(__name__)

# Countries a zone can belong to, with the map center used when one is selected
COUNTRY_CENTERS = {
    "India": LatLng(20.5937, 78.9629),
}
DEFAULT_COUNTRY = "India"


class DistanceUnit(str, Enum):
    KILOMETER = "kilometer"
    MILES = "miles"


class Coordinate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(ge=-180.0, le=180.0, validation_alias=AliasChoices("longitude", "lng"))

    def to_latlng(self) -> LatLng:
        return LatLng(self.latitude, self.longitude)


def _usable(raw: Any) -> bool:
    if isinstance(raw, Coordinate):
        return True
    if not isinstance(raw, dict):
        return False
    try:
        Coordinate.model_validate(raw)
    except PydanticValidationError:
        return False
    return True


class Zone(BaseModel):
    """A zone as the backend returns it. Coordinates may be fewer than 3 here."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    name: str = ""
    country: str = ""
    unit: DistanceUnit = DistanceUnit.KILOMETER
    coordinates: List[Coordinate] = Field(default_factory=list)
    is_active: bool = Field(default=True, validation_alias=AliasChoices("isActive", "is_active"))

    @model_validator(mode="before")
    @classmethod
    def _fill_name(cls, data: Any):
        if isinstance(data, dict) and not data.get("name") and data.get("zoneName"):
            data = {**data, "name": data["zoneName"]}
        return data

    @field_validator("coordinates", mode="before")
    @classmethod
    def _drop_malformed(cls, pts: Any):
        # null, blank or out-of-range points are skipped one at a time
        if not isinstance(pts, list):
            return []
        return [p for p in pts if _usable(p)]

    @field_validator("unit", mode="before")
    @classmethod
    def _default_unit(cls, unit: Any):
        return unit or DistanceUnit.KILOMETER


class ZonePayload(BaseModel):
    """Body of the create/update call."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    zone_name: str = Field(serialization_alias="zoneName")
    country: str
    unit: DistanceUnit = DistanceUnit.KILOMETER
    coordinates: List[Coordinate]
    is_active: bool = Field(default=True, serialization_alias="isActive")

    @field_validator("coordinates")
    @classmethod
    def _min_points(cls, pts: List[Coordinate]):
        if len(pts) < 3:
            raise ValueError("polygon must have >= 3 points")
        return pts

    def to_body(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def parse_zones(items: Any) -> List[Zone]:
    """Validate a list of zone documents, dropping the ones that can't be read."""
    zones: List[Zone] = []
    for raw in items if isinstance(items, list) else []:
        try:
            zones.append(Zone.model_validate(raw))
        except PydanticValidationError as exc:
            logger.warning("Skipping malformed zone %r: %d error(s)", _raw_id(raw), exc.error_count())
    return zones


def _raw_id(raw: Any) -> Any:
    return raw.get("_id", raw.get("id")) if isinstance(raw, dict) else None
