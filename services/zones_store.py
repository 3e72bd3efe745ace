"""JSON-file zone persistence, used instead of the backend in local setups."""

import json
import logging
import uuid
from pathlib import Path
from typing import List

from core.errors import APIError, ServerValidationError
from models.zone import Zone, ZonePayload, parse_zones

logger = logging.getLogger(__name__)


class FileZoneStore:
    def __init__(self, path: Path | str = "zones.json"):
        self.path = Path(path)

    async def list_zones(self, limit: int = 1000) -> List[Zone]:
        return self.load_zones()[:max(1, limit)]

    async def get_zone(self, zone_id: str) -> Zone:
        for zone in self.load_zones():
            if zone.id == zone_id:
                return zone
        raise APIError("Zone not found", 404)

    async def create_zone(self, payload: ZonePayload) -> Zone:
        self._check(payload)
        zones = self.load_zones()
        zone = Zone.model_validate({**payload.to_body(), "_id": uuid.uuid4().hex})
        # newest first, like the backend's createdAt sort
        zones.insert(0, zone)
        self.save_zones(zones)
        logger.info("Stored new zone %s (%s)", zone.id, zone.name)
        return zone

    async def update_zone(self, zone_id: str, payload: ZonePayload) -> Zone:
        self._check(payload)
        zones = self.load_zones()
        for i, zone in enumerate(zones):
            if zone.id == zone_id:
                zones[i] = Zone.model_validate({**payload.to_body(), "_id": zone_id})
                self.save_zones(zones)
                return zones[i]
        raise APIError("Zone not found", 404)

    async def close(self) -> None:
        return None

    def load_zones(self) -> List[Zone]:
        if not self.path.exists():
            return []
        text = self.path.read_text(encoding="utf-8").strip()
        if not text:
            return []
        try:
            zones_list = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable zone store %s", self.path)
            return []
        return parse_zones(zones_list)

    def save_zones(self, zones: List[Zone]) -> None:
        self.path.write_text(
            json.dumps([self._dump(z) for z in zones], indent=2),
            encoding="utf-8"
        )

    @staticmethod
    def _dump(zone: Zone) -> dict:
        body = zone.model_dump(mode="json")
        return {
            "_id": body.pop("id"),
            "zoneName": body["name"],
            "isActive": body.pop("is_active"),
            **body,
        }

    @staticmethod
    def _check(payload: ZonePayload) -> None:
        # mirrors the backend's own checks
        if not payload.name.strip():
            raise ServerValidationError("Zone name is required", 400)
        if not payload.country.strip():
            raise ServerValidationError("Country is required", 400)
