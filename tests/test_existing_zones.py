"""Tests for the read-only existing-zones overlay."""

from __future__ import annotations

import pytest

from models.geo import LatLng
from models.zone import Zone
from services.existing_zones import ExistingZonesOverlay
from services.map_session import ACTIVE_POLYGON_STYLE
from tests.conftest import coords, square_zone


@pytest.fixture
def map_(sdk):
    return sdk.create_map(LatLng(20.5937, 78.9629), 5)


@pytest.fixture
def overlay() -> ExistingZonesOverlay:
    return ExistingZonesOverlay()


class TestRender:
    def test_skips_zones_with_fewer_than_three_points(self, sdk, map_, overlay):
        zones = [
            square_zone("a", "Andheri", 19.1, 72.8),
            Zone.model_validate({"_id": "b", "name": "Line", "coordinates": [{"lat": 1, "lng": 1}, {"lat": 2, "lng": 2}]}),
            Zone.model_validate({"_id": "c", "name": "Empty"}),
        ]
        assert overlay.render(sdk, map_, zones) == 1
        assert list(overlay.polygons) == ["a"]

    def test_malformed_coordinates_are_dropped_before_counting(self, sdk, map_, overlay):
        zone = Zone.model_validate(
            {
                "_id": "x",
                "name": "Patchy",
                "coordinates": [{"latitude": 1, "longitude": 1}, {"latitude": None, "longitude": 2}, {"lat": 2, "lng": 2}],
            }
        )
        assert len(zone.coordinates) == 2
        assert overlay.render(sdk, map_, [zone]) == 0

    def test_polygons_are_read_only_and_below_active(self, sdk, map_, overlay):
        overlay.render(sdk, map_, [square_zone("a", "Andheri", 19.1, 72.8)])
        polygon = overlay.polygons["a"]
        assert polygon.editable is False
        assert polygon.draggable is False
        assert polygon.style.z_index < ACTIVE_POLYGON_STYLE.z_index
        assert polygon.style.fill_opacity < ACTIVE_POLYGON_STYLE.fill_opacity
        assert polygon.style.fill_color != ACTIVE_POLYGON_STYLE.fill_color

    def test_rerender_replaces_previous_polygons(self, sdk, map_, overlay):
        overlay.render(sdk, map_, [square_zone("a", "Andheri", 19.1, 72.8)])
        old = overlay.polygons["a"]
        overlay.render(sdk, map_, [square_zone("b", "Bandra", 19.05, 72.83)])
        assert old.map is None
        assert list(overlay.polygons) == ["b"]
        assert map_.overlays == [overlay.polygons["b"]]

    def test_no_map_renders_nothing(self, sdk, overlay):
        assert overlay.render(sdk, None, [square_zone("a", "Andheri", 19.1, 72.8)]) == 0


class TestClick:
    def test_click_opens_info_at_first_vertex(self, sdk, map_, overlay):
        overlay.render(sdk, map_, [square_zone("a", "Andheri West", 19.1, 72.8)])
        window = overlay.click("a")
        assert "Andheri West" in window.content
        assert "Country: India" in window.content
        assert window.position == LatLng(19.1, 72.8)
        assert window.map is map_

    def test_fallback_labels(self, sdk, map_, overlay):
        zone = Zone.model_validate({"_id": "n", "coordinates": [{"lat": 1, "lng": 1}, {"lat": 1, "lng": 2}, {"lat": 2, "lng": 2}]})
        overlay.render(sdk, map_, [zone])
        content = overlay.click("n").content
        assert "Unnamed Zone" in content
        assert "N/A" in content

    def test_unknown_zone(self, sdk, map_, overlay):
        overlay.render(sdk, map_, [])
        assert overlay.click("missing") is None

    def test_only_one_popup_open(self, sdk, map_, overlay):
        overlay.render(sdk, map_, [square_zone("a", "A", 19.1, 72.8), square_zone("b", "B", 19.5, 72.8)])
        first = overlay.click("a")
        overlay.click("b")
        assert first.map is None


class TestOverlap:
    def test_reports_overlapping_zone_ids(self, sdk, map_, overlay):
        overlay.render(sdk, map_, [square_zone("a", "A", 19.0, 72.0), square_zone("b", "B", 25.0, 80.0)])
        draft = coords((19.05, 72.05), (19.05, 72.3), (19.3, 72.3))
        assert overlay.overlapping(draft) == ["a"]

    def test_needs_a_polygon(self, sdk, map_, overlay):
        overlay.render(sdk, map_, [square_zone("a", "A", 19.0, 72.0)])
        assert overlay.overlapping(coords((19.05, 72.05))) == []
