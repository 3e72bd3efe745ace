from fastapi import APIRouter, Request
from typing import List

from api.routes.sessions import http_error
from core.errors import ZoneError
from models.zone import Zone

router = APIRouter(prefix="/zones", tags=["zones"])

@router.get("", response_model=List[Zone])
async def get_zones(request: Request, limit: int = 50):
    settings = request.app.state.settings
    try:
        return await request.app.state.persistence.list_zones(
            max(1, min(limit, settings.ZONES_FETCH_LIMIT))
        )
    except ZoneError as exc:
        raise http_error(exc)
