import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import state
from core.config import Settings
from services.map_sdk import HeadlessMapSDK, MapSDK
from services.sdk_loader import load_map_sdk
from services.zones_api import ZonePersistence, ZonesAPIClient
from services.zones_store import FileZoneStore
from api.routes import health, sessions, zones

logger = logging.getLogger(__name__)


async def load_headless_sdk() -> MapSDK:
    return HeadlessMapSDK()


def build_persistence(settings: Settings) -> ZonePersistence:
    if settings.uses_file_store:
        return FileZoneStore(settings.ZONES_STORE_PATH)
    return ZonesAPIClient(settings)


def create_app(
    settings: Optional[Settings] = None,
    persistence: Optional[ZonePersistence] = None,
    map_sdk: Optional[MapSDK] = None,
    sdk_fallback: Optional[Callable[[], Awaitable[MapSDK]]] = load_headless_sdk,
) -> FastAPI:
    settings = settings or Settings()
    persistence = persistence or build_persistence(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # --- startup ---
        logging.basicConfig(level=settings.LOG_LEVEL.upper())
        logger.info("Zone backend: %s", settings.ZONES_BACKEND)
        try:
            yield
        finally:
            # --- shutdown ---
            closed = state.close_all()
            if closed:
                logger.info("Closed %d open zone sessions", closed)
            await app.state.persistence.close()

    app = FastAPI(title="Zone Editor API", lifespan=lifespan)
    app.state.settings = settings
    app.state.persistence = persistence
    # an SDK provided up front wins; otherwise the loader polls, then falls back
    app.state.map_sdk = map_sdk

    async def load_sdk() -> Optional[MapSDK]:
        return await load_map_sdk(
            lambda: app.state.map_sdk,
            sdk_fallback,
            retries=settings.SDK_POLL_RETRIES,
            interval=settings.SDK_POLL_INTERVAL,
        )

    app.state.load_sdk = load_sdk

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(sessions.router)
    app.include_router(zones.router)
    app.include_router(health.router)

    return app


app = create_app(map_sdk=HeadlessMapSDK())
