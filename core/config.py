from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Zone persistence: "http" talks to the REST backend, "file" keeps zones in a JSON file
    ZONES_BACKEND: str = "http"
    ZONES_API_BASE_URL: str = "http://localhost:5000/api/admin"
    ZONES_API_TOKEN: str = ""
    ZONES_API_TIMEOUT: float = 10.0
    ZONES_STORE_PATH: str = "zones.json"
    ZONES_FETCH_LIMIT: int = 1000

    # Geometry
    COORDINATE_PRECISION: int = 6
    REQUIRE_SIMPLE_POLYGON: bool = True

    # Map SDK loading (50 * 100ms)
    SDK_POLL_RETRIES: int = 50
    SDK_POLL_INTERVAL: float = 0.1

    # Viewport
    DEFAULT_ZOOM: int = 5
    PLACE_ZOOM: int = 15

    ZONE_LIST_ROUTE: str = "/admin/zone-setup"

    # Abandoned sessions: closed after this many idle seconds, and the oldest
    # is evicted once the cap is reached
    SESSION_IDLE_TIMEOUT: float = 1800.0
    MAX_OPEN_SESSIONS: int = 200

    ALLOW_ORIGINS: str = "http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.ALLOW_ORIGINS.split(",") if o.strip()]

    @property
    def uses_file_store(self) -> bool:
        return self.ZONES_BACKEND.strip().lower() == "file"
