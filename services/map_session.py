from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from models.geo import LatLng, LatLngBounds
from models.zone import COUNTRY_CENTERS, DEFAULT_COUNTRY, Coordinate
from services.map_sdk import (
    PATH_EVENTS,
    POLYGON,
    DrawingManager,
    Map,
    MapSDK,
    Marker,
    OverlayCompleteEvent,
    Polygon,
    PolygonStyle,
)
from services.vertex_extractor import COORDINATE_PRECISION, extract_coordinates

logger = logging.getLogger(__name__)

ACTIVE_POLYGON_STYLE = PolygonStyle(
    stroke_color="#9333ea",
    fill_color="#9333ea",
    fill_opacity=0.35,
    stroke_weight=2,
    editable=True,
    draggable=False,
    clickable=False,
    z_index=1,
)


class MapSession:
    """Owns the map, the drawing toggle and at most one active polygon.

    Every change to the active polygon's vertices is pushed to
    ``on_vertices`` as a freshly extracted coordinate list. Vertex markers
    are torn down and recreated on each change; polygons have tens of
    vertices so there is no incremental diffing.
    """

    def __init__(
        self,
        on_vertices: Optional[Callable[[List[Coordinate]], None]] = None,
        *,
        default_zoom: int = 5,
        precision: int = COORDINATE_PRECISION,
    ):
        self.on_vertices = on_vertices
        self.default_zoom = default_zoom
        self.precision = precision
        self.sdk: Optional[MapSDK] = None
        self.map: Optional[Map] = None
        self.drawing_manager: Optional[DrawingManager] = None
        self.polygon: Optional[Polygon] = None
        self.markers: List[Marker] = []
        self.is_drawing = False
        self._unsubscribe: List[Callable[[], None]] = []
        self._path_unsubscribe: List[Callable[[], None]] = []

    @property
    def ready(self) -> bool:
        return self.map is not None

    def attach(self, sdk: Optional[MapSDK]) -> bool:
        """Create the map and drawing manager. Falls back to a placeholder on failure."""
        if sdk is None:
            logger.warning("Map SDK unavailable; showing placeholder")
            return False
        try:
            map_ = sdk.create_map(COUNTRY_CENTERS[DEFAULT_COUNTRY], self.default_zoom)
            manager = sdk.create_drawing_manager(map_, ACTIVE_POLYGON_STYLE)
        except Exception:
            logger.exception("Map SDK failed to initialise; showing placeholder")
            return False
        self.sdk = sdk
        self.map = map_
        self.drawing_manager = manager
        manager.set_drawing_mode(None)
        self._unsubscribe.append(
            manager.add_listener("overlaycomplete", self.on_polygon_complete)
        )
        return True

    # -- drawing ------------------------------------------------------------

    def toggle_drawing(self) -> bool:
        if self.drawing_manager is None:
            return self.is_drawing
        if self.is_drawing:
            self.drawing_manager.set_drawing_mode(None)
            self.is_drawing = False
        else:
            self.drawing_manager.set_drawing_mode(POLYGON)
            self.is_drawing = True
        return self.is_drawing

    def on_polygon_complete(self, event: OverlayCompleteEvent) -> None:
        if event.type != POLYGON:
            return
        self._remove_polygon()
        self._adopt(event.overlay)
        self.on_polygon_edited()

    def on_polygon_edited(self, *_args) -> None:
        coords = self.coordinates()
        self._render_markers(coords)
        if self.on_vertices is not None:
            self.on_vertices(coords)

    def load_polygon(self, coordinates: Sequence[Coordinate]) -> bool:
        """Show an existing zone as the active, editable polygon."""
        if self.sdk is None or self.map is None:
            return False
        if len(coordinates) < 3:
            logger.debug("load_polygon: not enough coordinates (%d)", len(coordinates))
            return False
        if self.drawing_manager is not None:
            self.drawing_manager.set_drawing_mode(None)
        self.is_drawing = False
        self._remove_polygon()
        path = [c.to_latlng() for c in coordinates]
        polygon = self.sdk.create_polygon(self.map, path, ACTIVE_POLYGON_STYLE)
        self._adopt(polygon)
        bounds = LatLngBounds.around(path)
        if bounds is not None:
            self.map.fit_bounds(bounds)
        self.on_polygon_edited()
        return True

    def clear(self) -> None:
        self._remove_polygon()
        if self.on_vertices is not None:
            self.on_vertices([])

    def recenter(self, center: LatLng, zoom: int) -> None:
        if self.map is None:
            return
        self.map.set_center(center)
        self.map.set_zoom(zoom)

    def coordinates(self) -> List[Coordinate]:
        if self.polygon is None:
            return []
        return extract_coordinates(self.polygon.get_path(), self.precision)

    def dispose(self) -> None:
        self._remove_polygon()
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        if self.drawing_manager is not None:
            self.drawing_manager.set_drawing_mode(None)
        self.is_drawing = False
        self.map = None
        self.drawing_manager = None
        self.sdk = None

    # -- internals ----------------------------------------------------------

    def _adopt(self, polygon: Polygon) -> None:
        polygon.set_editable(True)
        polygon.set_draggable(False)
        self.polygon = polygon
        path = polygon.get_path()
        self._path_unsubscribe = [
            path.add_listener(event, self.on_polygon_edited) for event in PATH_EVENTS
        ]

    def _remove_polygon(self) -> None:
        for unsubscribe in self._path_unsubscribe:
            unsubscribe()
        self._path_unsubscribe = []
        if self.polygon is not None:
            self.polygon.set_map(None)
            self.polygon = None
        self._clear_markers()

    def _clear_markers(self) -> None:
        for marker in self.markers:
            marker.set_map(None)
        self.markers = []

    def _render_markers(self, coords: Sequence[Coordinate]) -> None:
        self._clear_markers()
        if self.sdk is None or self.map is None:
            return
        self.markers = [
            self.sdk.create_marker(self.map, c.to_latlng(), f"Point {i + 1}")
            for i, c in enumerate(coords)
        ]
