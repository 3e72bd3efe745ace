from __future__ import annotations
import logging
import time
from typing import Dict, Optional

from services.zone_editor import ZoneEditor

logger = logging.getLogger(__name__)

# Open zone-editing sessions, keyed by session id. Only touched from the
# event loop, so no lock.
sessions: Dict[str, ZoneEditor] = {}


def register(editor: ZoneEditor, max_open: int) -> None:
    """Add a session, evicting the least recently used ones past max_open."""
    while sessions and len(sessions) >= max_open:
        oldest = min(sessions.values(), key=lambda e: e.last_active)
        logger.info("Evicting zone session %s (limit %d reached)", oldest.id, max_open)
        discard(oldest.id)
    sessions[editor.id] = editor


def discard(session_id: str) -> Optional[ZoneEditor]:
    editor = sessions.pop(session_id, None)
    if editor is not None:
        editor.dispose()
    return editor


def evict_idle(max_idle: float, now: Optional[float] = None) -> int:
    now = time.monotonic() if now is None else now
    stale = [sid for sid, e in sessions.items() if now - e.last_active > max_idle]
    for sid in stale:
        discard(sid)
    if stale:
        logger.info("Closed %d idle zone sessions", len(stale))
    return len(stale)


def close_all() -> int:
    count = len(sessions)
    for editor in sessions.values():
        editor.dispose()
    sessions.clear()
    return count
