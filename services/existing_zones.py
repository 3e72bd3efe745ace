from __future__ import annotations

import html
import logging
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from models.zone import Coordinate, Zone
from services.geometry import polygons_overlap
from services.map_sdk import InfoWindow, Map, MapSDK, Polygon, PolygonStyle

logger = logging.getLogger(__name__)

EXISTING_ZONE_STYLE = PolygonStyle(
    stroke_color="#3b82f6",
    fill_color="#3b82f6",
    fill_opacity=0.15,
    stroke_opacity=0.6,
    stroke_weight=2,
    editable=False,
    draggable=False,
    clickable=True,
    z_index=0,
)


def _key(zone: Zone, index: int) -> str:
    return zone.id or f"zone-{index}"


def info_content(zone: Zone) -> str:
    name = html.escape(zone.name or "Unnamed Zone")
    country = html.escape(zone.country or "N/A")
    return (
        '<div style="padding: 8px;">'
        f"<strong>{name}</strong><br/>"
        f"<small>Country: {country}</small>"
        "</div>"
    )


class ExistingZonesOverlay:
    """Read-only rendering of already persisted zones under the active polygon."""

    def __init__(self) -> None:
        self.zones: List[Zone] = []
        self.polygons: Dict[str, Polygon] = {}
        self.info_window: Optional[InfoWindow] = None

    def render(self, sdk: Optional[MapSDK], map_: Optional[Map], zones: Sequence[Zone]) -> int:
        """Redraw everything from scratch. Returns how many zones were drawn."""
        self.clear()
        self.zones = list(zones)
        if sdk is None or map_ is None:
            return 0
        for index, zone in enumerate(self.zones):
            if len(zone.coordinates) < 3:
                continue
            key = _key(zone, index)
            polygon = sdk.create_polygon(
                map_, [c.to_latlng() for c in zone.coordinates], EXISTING_ZONE_STYLE
            )
            polygon.add_listener(
                "click", lambda z=zone, p=polygon: self._show_info(sdk, map_, z, p)
            )
            self.polygons[key] = polygon
        logger.debug("Rendered %d of %d existing zones", len(self.polygons), len(self.zones))
        return len(self.polygons)

    def click(self, zone_id: str) -> Optional[InfoWindow]:
        polygon = self.polygons.get(zone_id)
        if polygon is None:
            return None
        polygon.click()
        return self.info_window

    def rendered(self) -> Iterator[Tuple[str, Zone, Polygon]]:
        for index, zone in enumerate(self.zones):
            key = _key(zone, index)
            polygon = self.polygons.get(key)
            if polygon is not None:
                yield key, zone, polygon

    def overlapping(self, coordinates: Sequence[Coordinate]) -> List[str]:
        if len(coordinates) < 3:
            return []
        return [
            key
            for key, zone, _ in self.rendered()
            if polygons_overlap(coordinates, zone.coordinates)
        ]

    def clear(self) -> None:
        for polygon in self.polygons.values():
            polygon.clear_listeners()
            polygon.set_map(None)
        self.polygons = {}
        if self.info_window is not None:
            self.info_window.close()
            self.info_window = None

    def _show_info(self, sdk: MapSDK, map_: Map, zone: Zone, polygon: Polygon) -> None:
        if self.info_window is not None:
            self.info_window.close()
        window = sdk.create_info_window(info_content(zone))
        window.set_position(polygon.get_path().get_at(0))
        window.open(map_)
        self.info_window = window
