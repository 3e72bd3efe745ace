from fastapi import APIRouter, Request

from core import state

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    s = request.app.state.settings
    return {
        "ok": True,
        "zones_backend": "file" if s.uses_file_store else "http",
        "map_sdk": request.app.state.map_sdk is not None,
        "open_sessions": len(state.sessions),
        "coordinate_precision": s.COORDINATE_PRECISION,
        "require_simple_polygon": s.REQUIRE_SIMPLE_POLYGON,
    }
