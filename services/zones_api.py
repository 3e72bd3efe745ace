"""Async client for the zone backend (``/zones`` under the admin API)."""

from __future__ import annotations

import logging
from typing import Any, List, Protocol

import httpx
from pydantic import ValidationError as PydanticValidationError

from core.config import Settings
from core.errors import APIError, NetworkError
from models.zone import Zone, ZonePayload, parse_zones

logger = logging.getLogger(__name__)


class ZonePersistence(Protocol):
    async def list_zones(self, limit: int = 1000) -> List[Zone]: ...

    async def get_zone(self, zone_id: str) -> Zone: ...

    async def create_zone(self, payload: ZonePayload) -> Zone: ...

    async def update_zone(self, zone_id: str, payload: ZonePayload) -> Zone: ...

    async def close(self) -> None: ...


class ZonesAPIClient:
    """Talks to the backend's ``{success, message, data}`` envelope API."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        headers: dict[str, str] = {}
        if settings.ZONES_API_TOKEN:
            headers["Authorization"] = f"Bearer {settings.ZONES_API_TOKEN}"
        self._http = httpx.AsyncClient(
            base_url=settings.ZONES_API_BASE_URL,
            timeout=httpx.Timeout(settings.ZONES_API_TIMEOUT),
            headers=headers,
            transport=transport,
        )

    # -- public API ----------------------------------------------------------

    async def list_zones(self, limit: int = 1000) -> List[Zone]:
        data = await self._request("GET", "/zones", params={"limit": limit})
        return parse_zones(data.get("zones"))

    async def get_zone(self, zone_id: str) -> Zone:
        data = await self._request("GET", f"/zones/{zone_id}")
        zone = data.get("zone")
        if not zone:
            raise APIError("Zone not found", 404)
        try:
            return Zone.model_validate(zone)
        except PydanticValidationError as exc:
            logger.error("Zone %s came back malformed: %s", zone_id, exc)
            raise APIError("The server returned invalid zone data", 502) from exc

    async def create_zone(self, payload: ZonePayload) -> Zone:
        data = await self._request("POST", "/zones", json=payload.to_body())
        return self._zone_or_payload(data, payload)

    async def update_zone(self, zone_id: str, payload: ZonePayload) -> Zone:
        data = await self._request("PUT", f"/zones/{zone_id}", json=payload.to_body())
        return self._zone_or_payload(data, payload, zone_id)

    async def close(self) -> None:
        await self._http.aclose()

    # -- internals -----------------------------------------------------------

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict:
        try:
            resp = await self._http.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.error("Zone backend unreachable (%s %s): %s", method, url, exc)
            raise NetworkError() from exc

        try:
            body = resp.json()
        except ValueError:
            body = None

        if resp.status_code >= 400:
            logger.error("Zone backend returned %d for %s %s", resp.status_code, method, url)
            raise APIError.from_response(resp.status_code, body)
        if not isinstance(body, dict) or not body.get("success"):
            message = body.get("message") if isinstance(body, dict) else None
            raise APIError(message or f"Server error: {resp.status_code}", resp.status_code)
        return body.get("data") or {}

    @staticmethod
    def _zone_or_payload(data: dict, payload: ZonePayload, zone_id: str | None = None) -> Zone:
        if data.get("zone"):
            try:
                return Zone.model_validate(data["zone"])
            except PydanticValidationError:
                logger.warning("Saved zone came back malformed; using the submitted fields")
        # some deployments answer with an empty data block
        return Zone.model_validate({**payload.to_body(), "_id": zone_id})
