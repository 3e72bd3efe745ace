from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from core.errors import GeometryError, ValidationError
from models.zone import COUNTRY_CENTERS, DEFAULT_COUNTRY, Coordinate, DistanceUnit, Zone, ZonePayload
from services.geometry import is_simple_polygon
from services.zones_api import ZonePersistence

logger = logging.getLogger(__name__)

MIN_VERTICES = 3


@dataclass
class ZoneForm:
    """Editable zone fields plus the current vertex list."""

    name: str = ""
    country: str = DEFAULT_COUNTRY
    unit: DistanceUnit = DistanceUnit.KILOMETER
    coordinates: List[Coordinate] = field(default_factory=list)
    zone_id: Optional[str] = None
    require_simple_polygon: bool = True

    @property
    def is_edit(self) -> bool:
        return self.zone_id is not None

    @property
    def is_complete(self) -> bool:
        return bool(self.name.strip() and self.country.strip() and len(self.coordinates) >= MIN_VERTICES)

    def load(self, zone: Zone) -> None:
        self.zone_id = zone.id
        self.name = zone.name
        self.country = zone.country or DEFAULT_COUNTRY
        self.unit = zone.unit
        self.coordinates = list(zone.coordinates)

    def validate(self) -> None:
        if not self.name.strip():
            raise ValidationError("Please enter a zone name")
        if not self.country.strip():
            raise ValidationError("Please select a country")
        if self.country not in COUNTRY_CENTERS:
            raise ValidationError(f"Unsupported country: {self.country}")
        if len(self.coordinates) < MIN_VERTICES:
            raise GeometryError("Please draw at least 3 points on the map to create a zone")
        if self.require_simple_polygon and not is_simple_polygon(self.coordinates):
            raise GeometryError("Zone boundary must not cross itself")

    def to_payload(self) -> ZonePayload:
        name = self.name.strip()
        return ZonePayload(
            name=name,
            zone_name=name,
            country=self.country,
            unit=self.unit,
            coordinates=list(self.coordinates),
            is_active=True,
        )

    async def submit(self, persistence: ZonePersistence) -> Zone:
        """Validate, then create or update. The form is left as-is on failure."""
        self.validate()
        payload = self.to_payload()
        if self.is_edit:
            zone = await persistence.update_zone(self.zone_id, payload)
            logger.info("Zone %s updated", self.zone_id)
        else:
            zone = await persistence.create_zone(payload)
            logger.info("Zone %s created", zone.id)
        return zone
