"""Shared test fixtures and helpers."""

from __future__ import annotations

import asyncio
from typing import List, Optional

import pytest

from core.config import Settings
from core.errors import APIError
from models.geo import LatLng
from models.zone import Coordinate, Zone, ZonePayload
from services.map_sdk import HeadlessMapSDK

TRIANGLE = [LatLng(20.5, 78.5), LatLng(20.6, 79.0), LatLng(20.9, 78.7)]


def coords(*pairs) -> List[Coordinate]:
    return [Coordinate(latitude=lat, longitude=lng) for lat, lng in pairs]


def square_zone(zone_id: Optional[str], name: str, lat: float, lng: float, size: float = 0.1, **extra) -> Zone:
    return Zone.model_validate(
        {
            "_id": zone_id,
            "name": name,
            "country": "India",
            "unit": "kilometer",
            "coordinates": [
                {"latitude": lat, "longitude": lng},
                {"latitude": lat, "longitude": lng + size},
                {"latitude": lat + size, "longitude": lng + size},
                {"latitude": lat + size, "longitude": lng},
            ],
            **extra,
        }
    )


class FakePersistence:
    """In-memory stand-in for the zone backend that records every call."""

    def __init__(self, zones: Optional[List[Zone]] = None):
        self.zones = {z.id: z for z in zones or []}
        self.calls: list = []
        self.list_error: Optional[Exception] = None
        self.get_error: Optional[Exception] = None
        self.write_error: Optional[Exception] = None
        self.write_gate: Optional[asyncio.Event] = None

    @property
    def writes(self) -> list:
        return [c for c in self.calls if c[0] in ("create", "update")]

    async def list_zones(self, limit: int = 1000) -> List[Zone]:
        self.calls.append(("list", limit))
        if self.list_error:
            raise self.list_error
        return list(self.zones.values())[:limit]

    async def get_zone(self, zone_id: str) -> Zone:
        self.calls.append(("get", zone_id))
        if self.get_error:
            raise self.get_error
        if zone_id not in self.zones:
            raise APIError("Zone not found", 404)
        return self.zones[zone_id]

    async def create_zone(self, payload: ZonePayload) -> Zone:
        self.calls.append(("create", payload))
        return await self._store("new-zone", payload)

    async def update_zone(self, zone_id: str, payload: ZonePayload) -> Zone:
        self.calls.append(("update", zone_id, payload))
        return await self._store(zone_id, payload)

    async def close(self) -> None:
        return None

    async def _store(self, zone_id: str, payload: ZonePayload) -> Zone:
        if self.write_gate is not None:
            await self.write_gate.wait()
        if self.write_error:
            raise self.write_error
        zone = Zone.model_validate({**payload.to_body(), "_id": zone_id})
        self.zones[zone_id] = zone
        return zone


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        ZONES_BACKEND="file",
        ZONES_STORE_PATH=str(tmp_path / "zones.json"),
        SDK_POLL_RETRIES=0,
        SDK_POLL_INTERVAL=0,
    )


@pytest.fixture
def persistence() -> FakePersistence:
    return FakePersistence()


@pytest.fixture
def sdk() -> HeadlessMapSDK:
    return HeadlessMapSDK()
