from enum import Enum
from typing import List, Optional
from pydantic import BaseModel

from models.zone import Coordinate, DistanceUnit, Zone


class EditorPhase(str, Enum):
    LOADING = "loading"
    NEW = "new"
    EDITING = "editing"
    SAVING = "saving"
    DONE = "done"
    ERROR = "error"


class Point(BaseModel):
    lat: float
    lng: float


class MarkerView(BaseModel):
    index: int  # 1-based
    title: str
    position: Point


class PolygonView(BaseModel):
    path: List[Point]
    editable: bool
    draggable: bool
    stroke_color: str
    fill_color: str
    fill_opacity: float
    z_index: int


class ExistingZoneView(BaseModel):
    id: str
    name: str
    country: str
    polygon: PolygonView


class InfoWindowView(BaseModel):
    content: str
    position: Optional[Point] = None


class MapView(BaseModel):
    ready: bool
    drawing: bool
    center: Optional[Point] = None
    zoom: Optional[int] = None
    polygon: Optional[PolygonView] = None
    markers: List[MarkerView] = []
    existing_zones: List[ExistingZoneView] = []
    info_window: Optional[InfoWindowView] = None


class FormView(BaseModel):
    zone_id: Optional[str] = None
    name: str
    country: str
    unit: DistanceUnit
    coordinates: List[Coordinate]


class SessionSnapshot(BaseModel):
    id: str
    mode: str  # "create" | "edit"
    phase: EditorPhase
    form: FormView
    map: MapView
    can_submit: bool
    overlapping_zone_ids: List[str] = []
    error: Optional[str] = None
    redirect: Optional[str] = None
    saved_zone: Optional[Zone] = None


class StartSessionRequest(BaseModel):
    zone_id: Optional[str] = None


class DrawPolygonRequest(BaseModel):
    path: List[Point]


class FormUpdate(BaseModel):
    name: Optional[str] = None
    country: Optional[str] = None
    unit: Optional[DistanceUnit] = None
