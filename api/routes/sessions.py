from fastapi import APIRouter, HTTPException, Request

from core import state
from core.errors import (
    APIError,
    MapSDKError,
    NetworkError,
    ServerValidationError,
    SubmitNotAllowedError,
    ValidationError,
    ZoneError,
)
from models.geo import LatLng
from models.session import (
    DrawPolygonRequest,
    EditorPhase,
    FormUpdate,
    InfoWindowView,
    Point,
    SessionSnapshot,
    StartSessionRequest,
)
from services.zone_editor import ZoneEditor

router = APIRouter(prefix="/zone-sessions", tags=["zone-sessions"])


def http_error(exc: ZoneError) -> HTTPException:
    if isinstance(exc, (ValidationError, ServerValidationError)):
        status = 422
    elif isinstance(exc, NetworkError):
        status = 503
    elif isinstance(exc, APIError):
        status = 502
    elif isinstance(exc, (SubmitNotAllowedError, MapSDKError)):
        status = 409
    else:
        status = 400
    return HTTPException(status_code=status, detail=exc.message)


def _editor(session_id: str) -> ZoneEditor:
    editor = state.sessions.get(session_id)
    if editor is None:
        raise HTTPException(status_code=404, detail="Zone session not found")
    editor.touch()
    return editor


def _polygon_path(editor: ZoneEditor):
    if editor.map.polygon is None:
        raise HTTPException(status_code=409, detail="No zone has been drawn yet")
    return editor.map.polygon.get_path()


@router.post("", response_model=SessionSnapshot, status_code=201)
async def start_session(body: StartSessionRequest, request: Request):
    settings = request.app.state.settings
    state.evict_idle(settings.SESSION_IDLE_TIMEOUT)
    editor = ZoneEditor(request.app.state.persistence, settings, body.zone_id)
    await editor.open(request.app.state.load_sdk)
    if editor.phase is EditorPhase.ERROR:
        # nothing to edit; the client follows snapshot.redirect
        editor.dispose()
        return editor.snapshot()
    state.register(editor, settings.MAX_OPEN_SESSIONS)
    return editor.snapshot()


@router.get("/{session_id}", response_model=SessionSnapshot)
async def get_session(session_id: str):
    return _editor(session_id).snapshot()


@router.delete("/{session_id}", status_code=204)
async def close_session(session_id: str):
    if state.discard(session_id) is None:
        raise HTTPException(status_code=404, detail="Zone session not found")


@router.post("/{session_id}/drawing/toggle", response_model=SessionSnapshot)
async def toggle_drawing(session_id: str):
    editor = _editor(session_id)
    editor.toggle_drawing()
    return editor.snapshot()


@router.post("/{session_id}/polygon", response_model=SessionSnapshot)
async def draw_polygon(session_id: str, body: DrawPolygonRequest):
    editor = _editor(session_id)
    try:
        editor.draw_polygon([LatLng(p.lat, p.lng) for p in body.path])
    except ZoneError as exc:
        raise http_error(exc)
    return editor.snapshot()


@router.delete("/{session_id}/polygon", response_model=SessionSnapshot)
async def clear_polygon(session_id: str):
    editor = _editor(session_id)
    editor.clear()
    return editor.snapshot()


@router.put("/{session_id}/polygon/vertices/{index}", response_model=SessionSnapshot)
async def move_vertex(session_id: str, index: int, body: Point):
    editor = _editor(session_id)
    try:
        _polygon_path(editor).set_at(index, LatLng(body.lat, body.lng))
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return editor.snapshot()


@router.post("/{session_id}/polygon/vertices/{index}", response_model=SessionSnapshot)
async def insert_vertex(session_id: str, index: int, body: Point):
    editor = _editor(session_id)
    try:
        _polygon_path(editor).insert_at(index, LatLng(body.lat, body.lng))
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return editor.snapshot()


@router.delete("/{session_id}/polygon/vertices/{index}", response_model=SessionSnapshot)
async def remove_vertex(session_id: str, index: int):
    editor = _editor(session_id)
    try:
        _polygon_path(editor).remove_at(index)
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return editor.snapshot()


@router.patch("/{session_id}/form", response_model=SessionSnapshot)
async def update_form(session_id: str, body: FormUpdate):
    editor = _editor(session_id)
    try:
        editor.update_form(name=body.name, country=body.country, unit=body.unit)
    except ZoneError as exc:
        raise http_error(exc)
    return editor.snapshot()


@router.post("/{session_id}/place", response_model=SessionSnapshot)
async def select_place(session_id: str, body: Point):
    editor = _editor(session_id)
    editor.select_place(LatLng(body.lat, body.lng))
    return editor.snapshot()


@router.post("/{session_id}/existing-zones/refresh", response_model=SessionSnapshot)
async def refresh_existing_zones(session_id: str):
    editor = _editor(session_id)
    await editor.refresh_existing_zones()
    return editor.snapshot()


@router.post("/{session_id}/existing-zones/{zone_id}/click", response_model=InfoWindowView)
async def click_existing_zone(session_id: str, zone_id: str):
    window = _editor(session_id).click_existing_zone(zone_id)
    if window is None:
        raise HTTPException(status_code=404, detail="Zone not shown on this map")
    return window


@router.post("/{session_id}/submit", response_model=SessionSnapshot)
async def submit(session_id: str):
    editor = _editor(session_id)
    try:
        await editor.submit()
    except ZoneError as exc:
        raise http_error(exc)
    snapshot = editor.snapshot()
    state.discard(session_id)
    return snapshot
