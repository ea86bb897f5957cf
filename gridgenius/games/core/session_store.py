# gridgenius/games/core/session_store.py
from __future__ import annotations
from collections import OrderedDict
from typing import Callable, Optional, TypeVar
import logging
import uuid

from flask import current_app

from .game_core import GameState

logger = logging.getLogger(__name__)

T = TypeVar("T")

STORE_KEY = "grid_genius_sessions"
DEFAULT_MAX_SESSIONS = 1000


class SessionStore:
    """
    In-memory GameState handles per server process, keyed by session id.
    Oldest sessions are evicted once max_sessions is reached.
    """
    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS):
        self.max_sessions = max_sessions
        self._games: "OrderedDict[str, GameState]" = OrderedDict()

    def get(self, sid: str) -> Optional[GameState]:
        state = self._games.get(sid)
        if state is not None:
            self._games.move_to_end(sid)
        return state

    def put(self, sid: str, state: GameState) -> GameState:
        self._games[sid] = state
        self._games.move_to_end(sid)
        while len(self._games) > self.max_sessions:
            old, _ = self._games.popitem(last=False)
            logger.info("evicted grid session %s", old)
        return state

    def drop(self, sid: str) -> bool:
        return self._games.pop(sid, None) is not None

    def __len__(self) -> int:
        return len(self._games)

    def __contains__(self, sid: str) -> bool:
        return sid in self._games


# --------- accessors (store lives on current_app) ----------
def get_store(key: str = STORE_KEY, factory: Optional[Callable[[], T]] = None) -> T:
    ext = getattr(current_app, "extensions", None)
    if ext is None:
        current_app.extensions = {}
        ext = current_app.extensions
    store = ext.get(key)
    if store is None:
        if factory is None:
            cap = int(current_app.config.get("GRID_MAX_SESSIONS", DEFAULT_MAX_SESSIONS))
            store = SessionStore(max_sessions=cap)
        else:
            store = factory()
        ext[key] = store
    return store


# ============================================================
# Session & identity helpers
# ============================================================

def get_or_create_session_id(req) -> str:
    """
    Stable per-user (and optionally per-tab) session key:
      cookie 'session_id' (if present) else a new uuid4,
      optionally suffixed with ':<client_id>' (arg/body/header) to isolate tabs.
    """
    base = req.cookies.get("session_id") or str(uuid.uuid4())

    client = req.args.get("client_id")
    if not client and req.is_json:
        j = req.get_json(silent=True) or {}
        client = j.get("client_id")
    if not client:
        client = req.headers.get("X-Client-Session")

    if client:
        return f"{base}:{str(client)[:64]}"
    return base


def cookie_part(sid: str) -> str:
    """The cookie value behind a (possibly tab-suffixed) session id."""
    return sid.split(":", 1)[0]
