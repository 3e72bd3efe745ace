import asyncio
import logging
from typing import Awaitable, Callable, Optional

from services.map_sdk import MapSDK

logger = logging.getLogger(__name__)


async def load_map_sdk(
    probe: Callable[[], Optional[MapSDK]],
    fallback: Optional[Callable[[], Awaitable[MapSDK]]] = None,
    *,
    retries: int = 50,
    interval: float = 0.1,
) -> Optional[MapSDK]:
    """Wait for an already-provided SDK, then try loading one directly.

    Returns None when neither works; callers show a placeholder map.
    """
    sdk = probe()
    attempts = 0
    while sdk is None and attempts < retries:
        await asyncio.sleep(interval)
        attempts += 1
        sdk = probe()
    if sdk is not None:
        return sdk

    if fallback is None:
        logger.warning("Map SDK not available after %d polls", attempts)
        return None
    try:
        return await fallback()
    except Exception:
        logger.exception("Error loading map SDK")
        return None
