from __future__ import annotations

import logging
import time
import uuid
from typing import Awaitable, Callable, List, Optional

from core.config import Settings
from core.errors import SubmitNotAllowedError, ValidationError, ZoneError
from models.geo import LatLng
from models.session import (
    EditorPhase,
    ExistingZoneView,
    FormView,
    InfoWindowView,
    MapView,
    MarkerView,
    Point,
    PolygonView,
    SessionSnapshot,
)
from models.zone import COUNTRY_CENTERS, Coordinate, DistanceUnit, Zone
from services.existing_zones import ExistingZonesOverlay
from services.map_sdk import MapSDK, Polygon
from services.map_session import MapSession
from services.zone_form import ZoneForm
from services.zones_api import ZonePersistence

logger = logging.getLogger(__name__)

SdkSource = Callable[[], Awaitable[Optional[MapSDK]]]


def _point(p: LatLng) -> Point:
    return Point(lat=p.lat, lng=p.lng)


def _polygon_view(polygon: Polygon) -> PolygonView:
    return PolygonView(
        path=[_point(p) for p in polygon.get_path().get_array()],
        editable=polygon.editable,
        draggable=polygon.draggable,
        stroke_color=polygon.style.stroke_color,
        fill_color=polygon.style.fill_color,
        fill_opacity=polygon.style.fill_opacity,
        z_index=polygon.style.z_index,
    )


class ZoneEditor:
    """One zone-editing session: map, existing zones and form wired together.

    Phases::

        loading --ok--> editing          loading --fail--> error
        new --(>=3 vertices)--> editing
        editing --submit--> saving --ok--> done
                                   --fail--> editing (error kept)
    """

    def __init__(self, persistence: ZonePersistence, settings: Settings, zone_id: Optional[str] = None):
        self.id = uuid.uuid4().hex
        self.persistence = persistence
        self.settings = settings
        self.form = ZoneForm(zone_id=zone_id, require_simple_polygon=settings.REQUIRE_SIMPLE_POLYGON)
        self.map = MapSession(
            self._on_vertices,
            default_zoom=settings.DEFAULT_ZOOM,
            precision=settings.COORDINATE_PRECISION,
        )
        self.overlay = ExistingZonesOverlay()
        self.phase = EditorPhase.LOADING if zone_id else EditorPhase.NEW
        self.error: Optional[str] = None
        self.redirect: Optional[str] = None
        self.saved_zone: Optional[Zone] = None
        self.last_active = time.monotonic()

    def touch(self) -> None:
        self.last_active = time.monotonic()

    @property
    def mode(self) -> str:
        return "edit" if self.form.is_edit else "create"

    @property
    def can_submit(self) -> bool:
        return self.phase in (EditorPhase.NEW, EditorPhase.EDITING) and self.form.is_complete

    async def open(self, load_sdk: SdkSource) -> None:
        zones = await self._fetch_existing_zones()
        self.map.attach(await load_sdk())
        self.overlay.render(self.map.sdk, self.map.map, zones)
        if self.phase is EditorPhase.LOADING:
            await self._load_zone()
        logger.info("Zone session %s opened (%s, %s)", self.id, self.mode, self.phase.value)

    async def refresh_existing_zones(self) -> int:
        zones = await self._fetch_existing_zones()
        return self.overlay.render(self.map.sdk, self.map.map, zones)

    # -- user actions -------------------------------------------------------

    def toggle_drawing(self) -> bool:
        return self.map.toggle_drawing()

    def draw_polygon(self, path: List[LatLng]) -> None:
        if self.map.drawing_manager is None:
            return
        self.map.drawing_manager.finish_polygon(path)

    def clear(self) -> None:
        self.map.clear()

    def update_form(
        self,
        *,
        name: Optional[str] = None,
        country: Optional[str] = None,
        unit: Optional[DistanceUnit] = None,
    ) -> None:
        # "" is the unselected state; anything else must be a known country
        if country and country not in COUNTRY_CENTERS:
            raise ValidationError(f"Unsupported country: {country}")
        if name is not None:
            self.form.name = name
        if unit is not None:
            self.form.unit = unit
        if country is not None:
            self.form.country = country
            center = COUNTRY_CENTERS.get(country)
            if center is not None:
                self.map.recenter(center, self.settings.DEFAULT_ZOOM)

    def select_place(self, location: LatLng) -> None:
        self.map.recenter(location, self.settings.PLACE_ZOOM)

    def click_existing_zone(self, zone_id: str) -> Optional[InfoWindowView]:
        window = self.overlay.click(zone_id)
        if window is None:
            return None
        return InfoWindowView(
            content=window.content,
            position=_point(window.position) if window.position else None,
        )

    async def submit(self) -> Zone:
        if self.phase not in (EditorPhase.NEW, EditorPhase.EDITING):
            raise SubmitNotAllowedError(f"Cannot submit while the zone is {self.phase.value}")
        try:
            self.form.validate()
        except ValidationError as exc:
            self.error = exc.message
            raise

        self.phase = EditorPhase.SAVING
        self.error = None
        try:
            zone = await self.form.submit(self.persistence)
        except ZoneError as exc:
            logger.warning("Saving zone failed: %s", exc.message)
            self.phase = EditorPhase.EDITING
            self.error = exc.message
            raise
        self.phase = EditorPhase.DONE
        self.saved_zone = zone
        self.redirect = self.settings.ZONE_LIST_ROUTE
        return zone

    def dispose(self) -> None:
        self.map.dispose()
        self.overlay.clear()

    # -- internals ----------------------------------------------------------

    def _on_vertices(self, coords: List[Coordinate]) -> None:
        self.form.coordinates = coords
        if self.phase is EditorPhase.NEW and len(coords) >= 3:
            self.phase = EditorPhase.EDITING

    async def _fetch_existing_zones(self) -> List[Zone]:
        try:
            zones = await self.persistence.list_zones(self.settings.ZONES_FETCH_LIMIT)
        except ZoneError as exc:
            logger.warning("Error fetching existing zones: %s", exc.message)
            return []
        return [z for z in zones if not (self.form.zone_id and z.id == self.form.zone_id)]

    async def _load_zone(self) -> None:
        try:
            zone = await self.persistence.get_zone(self.form.zone_id)
        except ZoneError as exc:
            logger.error("Error fetching zone %s: %s", self.form.zone_id, exc.message)
            self.phase = EditorPhase.ERROR
            self.error = "Failed to load zone"
            self.redirect = self.settings.ZONE_LIST_ROUTE
            return
        self.form.load(zone)
        # drawing the polygon re-extracts its vertices into the form
        self.map.load_polygon(zone.coordinates)
        self.phase = EditorPhase.EDITING

    def snapshot(self) -> SessionSnapshot:
        m = self.map.map
        info = self.overlay.info_window
        map_view = MapView(
            ready=self.map.ready,
            drawing=self.map.is_drawing,
            center=_point(m.center) if m else None,
            zoom=m.zoom if m else None,
            polygon=_polygon_view(self.map.polygon) if self.map.polygon else None,
            markers=[
                MarkerView(index=i + 1, title=mk.title, position=_point(mk.position))
                for i, mk in enumerate(self.map.markers)
            ],
            existing_zones=[
                ExistingZoneView(
                    id=key,
                    name=zone.name,
                    country=zone.country,
                    polygon=_polygon_view(polygon),
                )
                for key, zone, polygon in self.overlay.rendered()
            ],
            info_window=(
                InfoWindowView(
                    content=info.content,
                    position=_point(info.position) if info.position else None,
                )
                if info is not None
                else None
            ),
        )
        return SessionSnapshot(
            id=self.id,
            mode=self.mode,
            phase=self.phase,
            form=FormView(
                zone_id=self.form.zone_id,
                name=self.form.name,
                country=self.form.country,
                unit=self.form.unit,
                coordinates=self.form.coordinates,
            ),
            map=map_view,
            can_submit=self.can_submit,
            overlapping_zone_ids=self.overlay.overlapping(self.form.coordinates),
            error=self.error,
            redirect=self.redirect,
            saved_zone=self.saved_zone,
        )
