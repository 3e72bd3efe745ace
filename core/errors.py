from __future__ import annotations


class ZoneError(Exception):
    """Base class; ``message`` is always safe to show to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ZoneError):
    """Local, pre-submit validation failure. No network call was made."""


class GeometryError(ValidationError):
    """The drawn polygon is not usable (too few points, self-intersecting)."""


class NetworkError(ZoneError):
    """The zone backend could not be reached."""

    DEFAULT_MESSAGE = "Cannot connect to server. Please make sure the backend server is running."

    def __init__(self, message: str = DEFAULT_MESSAGE):
        super().__init__(message)


class APIError(ZoneError):
    """The backend answered with an error status or a non-success envelope."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @classmethod
    def from_response(cls, status_code: int, body: object) -> "APIError":
        message = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
        if status_code in (400, 422):
            return ServerValidationError(
                message or ServerValidationError.DEFAULT_MESSAGE, status_code
            )
        return cls(message or f"Server error: {status_code}", status_code)


class ServerValidationError(APIError):
    """The backend rejected the zone data."""

    DEFAULT_MESSAGE = "The server rejected the zone data"


class SubmitNotAllowedError(ZoneError):
    """Submit attempted while the session cannot accept one (e.g. already saving)."""


class MapSDKError(ZoneError):
    """Misuse of the map SDK, e.g. finishing a polygon while drawing mode is off."""
