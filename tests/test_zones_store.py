"""Tests for the JSON-file zone store."""

from __future__ import annotations

import json

import pytest

from core.errors import APIError, ServerValidationError
from models.zone import ZonePayload
from services.zones_store import FileZoneStore
from tests.conftest import coords


def _payload(name="Powai", country="India"):
    return ZonePayload(
        name=name,
        zone_name=name,
        country=country,
        coordinates=coords((19.11, 72.9), (19.12, 72.91), (19.13, 72.9)),
    )


@pytest.fixture
def store(tmp_path) -> FileZoneStore:
    return FileZoneStore(tmp_path / "zones.json")


class TestFileZoneStore:
    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, store):
        assert await store.list_zones() == []

    @pytest.mark.asyncio
    async def test_create_then_read_back(self, store):
        created = await store.create_zone(_payload())
        assert created.id
        fetched = await store.get_zone(created.id)
        assert fetched.name == "Powai"
        assert len(fetched.coordinates) == 3
        raw = json.loads(store.path.read_text(encoding="utf-8"))
        assert raw[0]["_id"] == created.id
        assert raw[0]["zoneName"] == "Powai"
        assert raw[0]["isActive"] is True

    @pytest.mark.asyncio
    async def test_newest_first(self, store):
        await store.create_zone(_payload("First"))
        await store.create_zone(_payload("Second"))
        assert [z.name for z in await store.list_zones()] == ["Second", "First"]

    @pytest.mark.asyncio
    async def test_update(self, store):
        created = await store.create_zone(_payload())
        updated = await store.update_zone(created.id, _payload("Powai East"))
        assert updated.id == created.id
        assert (await store.get_zone(created.id)).name == "Powai East"

    @pytest.mark.asyncio
    async def test_unknown_zone(self, store):
        with pytest.raises(APIError) as info:
            await store.get_zone("nope")
        assert info.value.status_code == 404
        with pytest.raises(APIError):
            await store.update_zone("nope", _payload())

    @pytest.mark.asyncio
    async def test_rejects_blank_name_like_the_backend(self, store):
        with pytest.raises(ServerValidationError, match="Zone name is required"):
            await store.create_zone(_payload(name=""))

    @pytest.mark.asyncio
    async def test_corrupt_file_reads_as_empty(self, store):
        store.path.write_text("{not json", encoding="utf-8")
        assert await store.list_zones() == []

    @pytest.mark.asyncio
    async def test_malformed_entries_are_skipped(self, store):
        store.path.write_text(
            json.dumps(
                [
                    {
                        "_id": "a",
                        "zoneName": "Andheri",
                        "country": "India",
                        "coordinates": [
                            {"latitude": 19.11, "longitude": 72.84},
                            {"latitude": "", "longitude": 72.85},
                            {"latitude": "north", "longitude": 72.86},
                            {"latitude": 91.0, "longitude": 72.86},
                            {"latitude": 19.12, "longitude": 72.86},
                            {"latitude": 19.13, "longitude": 72.84},
                        ],
                    },
                    {"_id": "b", "name": "Broken", "unit": "furlongs"},
                ]
            ),
            encoding="utf-8",
        )
        zones = await store.list_zones()
        assert [z.id for z in zones] == ["a"]
        assert len(zones[0].coordinates) == 3
