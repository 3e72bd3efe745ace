"""Map SDK interface and the in-process (headless) implementation.

The editing session never reads a global SDK object. It is handed something
satisfying :class:`MapSDK` and treats every handle it gets back as a
side-effecting adapter: overlays are attached to a map with ``set_map(map)``
and detached with ``set_map(None)``; paths are observable sequences that
emit ``set_at`` / ``insert_at`` / ``remove_at``; the drawing manager emits
``overlaycomplete`` when the user finishes a polygon.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from core.errors import MapSDKError
from models.geo import LatLng, LatLngBounds

POLYGON = "polygon"
PATH_EVENTS = ("set_at", "insert_at", "remove_at")

_ids = itertools.count(1)


@dataclass(frozen=True)
class PolygonStyle:
    stroke_color: str
    fill_color: str
    fill_opacity: float
    stroke_opacity: float = 0.8
    stroke_weight: int = 2
    editable: bool = False
    draggable: bool = False
    clickable: bool = False
    z_index: int = 0


class _Emitter:
    def __init__(self) -> None:
        self._listeners: Dict[str, List[Callable[..., Any]]] = {}

    def add_listener(self, event: str, callback: Callable[..., Any]) -> Callable[[], None]:
        self._listeners.setdefault(event, []).append(callback)

        def remove() -> None:
            callbacks = self._listeners.get(event, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return remove

    def clear_listeners(self) -> None:
        self._listeners.clear()

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def _emit(self, event: str, *args: Any) -> None:
        for callback in list(self._listeners.get(event, [])):
            callback(*args)


class Map:
    def __init__(self, center: LatLng, zoom: int):
        self.center = center
        self.zoom = zoom
        self.overlays: List[Any] = []

    def set_center(self, center: LatLng) -> None:
        self.center = center

    def set_zoom(self, zoom: int) -> None:
        self.zoom = zoom

    def fit_bounds(self, bounds: LatLngBounds) -> None:
        self.center = bounds.center
        span = max(bounds.north - bounds.south, bounds.east - bounds.west)
        # Rough web-mercator fit: each zoom level halves the visible span
        zoom = 1
        while zoom < 20 and 360.0 / (2 ** zoom) > span:
            zoom += 1
        self.zoom = max(zoom - 1, 1)

    def _attach(self, overlay: Any) -> None:
        if overlay not in self.overlays:
            self.overlays.append(overlay)

    def _detach(self, overlay: Any) -> None:
        if overlay in self.overlays:
            self.overlays.remove(overlay)


class _Overlay(_Emitter):
    def __init__(self) -> None:
        super().__init__()
        self.id = next(_ids)
        self.map: Optional[Map] = None

    def set_map(self, map_: Optional[Map]) -> None:
        if self.map is not None:
            self.map._detach(self)
        self.map = map_
        if map_ is not None:
            map_._attach(self)


class PolygonPath(_Emitter):
    """Observable, mutable vertex list of a polygon."""

    def __init__(self, points: Iterable[LatLng] = ()):
        super().__init__()
        self._points: List[LatLng] = list(points)

    def get_length(self) -> int:
        return len(self._points)

    def get_at(self, index: int) -> LatLng:
        return self._points[index]

    def get_array(self) -> List[LatLng]:
        return list(self._points)

    def set_at(self, index: int, point: LatLng) -> None:
        self._check(index, self.get_length() - 1)
        self._points[index] = point
        self._emit("set_at", index)

    def insert_at(self, index: int, point: LatLng) -> None:
        self._check(index, self.get_length())
        self._points.insert(index, point)
        self._emit("insert_at", index)

    def remove_at(self, index: int) -> LatLng:
        self._check(index, self.get_length() - 1)
        removed = self._points.pop(index)
        self._emit("remove_at", index, removed)
        return removed

    @staticmethod
    def _check(index: int, upper: int) -> None:
        if not 0 <= index <= upper:
            raise IndexError(f"vertex index {index} out of range")


class Polygon(_Overlay):
    def __init__(self, path: Iterable[LatLng], style: PolygonStyle):
        super().__init__()
        self._path = PolygonPath(path)
        self.style = style
        self.editable = style.editable
        self.draggable = style.draggable

    def get_path(self) -> PolygonPath:
        return self._path

    def set_editable(self, editable: bool) -> None:
        self.editable = editable

    def set_draggable(self, draggable: bool) -> None:
        self.draggable = draggable

    def click(self) -> None:
        if not self.style.clickable:
            return
        self._emit("click")


class Marker(_Overlay):
    def __init__(self, position: LatLng, title: str, z_index: int = 1000):
        super().__init__()
        self.position = position
        self.title = title
        self.z_index = z_index


class InfoWindow(_Overlay):
    def __init__(self, content: str):
        super().__init__()
        self.content = content
        self.position: Optional[LatLng] = None

    def set_position(self, position: LatLng) -> None:
        self.position = position

    def open(self, map_: Map) -> None:
        self.set_map(map_)

    def close(self) -> None:
        self.set_map(None)


@dataclass
class OverlayCompleteEvent:
    type: str
    overlay: Polygon


class DrawingManager(_Emitter):
    def __init__(self, map_: Map, polygon_style: PolygonStyle):
        super().__init__()
        self.map = map_
        self.polygon_style = polygon_style
        self.drawing_mode: Optional[str] = None

    def set_drawing_mode(self, mode: Optional[str]) -> None:
        self.drawing_mode = mode

    def finish_polygon(self, path: Iterable[LatLng]) -> Polygon:
        """What the user's final click does: emit ``overlaycomplete``."""
        if self.drawing_mode != POLYGON:
            raise MapSDKError("Turn on drawing mode before drawing a zone")
        polygon = Polygon(path, self.polygon_style)
        polygon.set_map(self.map)
        self._emit("overlaycomplete", OverlayCompleteEvent(POLYGON, polygon))
        return polygon


class MapSDK(Protocol):
    def create_map(self, center: LatLng, zoom: int) -> Map: ...

    def create_drawing_manager(self, map_: Map, polygon_style: PolygonStyle) -> DrawingManager: ...

    def create_polygon(self, map_: Map, path: Iterable[LatLng], style: PolygonStyle) -> Polygon: ...

    def create_marker(self, map_: Map, position: LatLng, title: str) -> Marker: ...

    def create_info_window(self, content: str) -> InfoWindow: ...


class HeadlessMapSDK:
    """Keeps every map object in process; the browser only renders snapshots."""

    def create_map(self, center: LatLng, zoom: int) -> Map:
        return Map(center, zoom)

    def create_drawing_manager(self, map_: Map, polygon_style: PolygonStyle) -> DrawingManager:
        return DrawingManager(map_, polygon_style)

    def create_polygon(self, map_: Map, path: Iterable[LatLng], style: PolygonStyle) -> Polygon:
        polygon = Polygon(path, style)
        polygon.set_map(map_)
        return polygon

    def create_marker(self, map_: Map, position: LatLng, title: str) -> Marker:
        marker = Marker(position, title)
        marker.set_map(map_)
        return marker

    def create_info_window(self, content: str) -> InfoWindow:
        return InfoWindow(content)
