# gridgenius/games/grid_genius/routes.py
from __future__ import annotations
from typing import Any, Dict, Optional
import logging
import random

from flask import current_app, jsonify, make_response, request

from gridgenius import limiter
from gridgenius.games.core.coerce_utils import coerce_int, coerce_int_list, coerce_operator_instance, coerce_operator_list
from gridgenius.games.core.difficulty import DIFFICULTY_CONFIGS, GAME_MODES, TICK_MS, normalize_level, normalize_mode
from gridgenius.games.core.game_core import (
    GameState,
    clear_selection,
    initialize_game,
    next_round,
    pause_game,
    request_hint,
    reset_game,
    resume_game,
    select_operator,
    select_tile,
    state_payload,
    submit_swipe,
    sync_clock,
    tick,
)
from gridgenius.games.core.grid_generator import GenerationExhaustedError
from gridgenius.games.core.playflow import now_ms
from gridgenius.games.core.session_store import cookie_part, get_or_create_session_id, get_store

from . import bp

logger = logging.getLogger(__name__)

MAX_TICK_MS = 10_000


# -----------------------------------------------------------------------------
# Small per-request helpers
# -----------------------------------------------------------------------------
def _sid() -> str:
    return get_or_create_session_id(request)

def _data() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}

def _server_clock() -> bool:
    return current_app.config.get("GRID_CLOCK", "server") == "server"

def _now() -> Optional[int]:
    """Server clock sample, or None when the client drives time through /api/tick."""
    return now_ms() if _server_clock() else None

def _game() -> Optional[GameState]:
    state = get_store().get(_sid())
    if state is not None:
        now = _now()
        if now is not None:
            sync_clock(state, now)
    return state

def _error(code: str, http_status: int, **extra):
    return jsonify({"ok": False, "error": code, **extra}), http_status

def _no_game():
    return _error("no_game", 404, message="Start a game first")

def _not_playing(state: GameState):
    return _error("not_playing", 409, status=state.game_status)

def _brief(state: GameState) -> Dict[str, Any]:
    return {
        "status": state.game_status,
        "target": state.current_target,
        "round": state.current_round,
        "total_rounds": state.total_rounds,
        "score": state.score,
        "time_attack_left_ms": state.time_attack_left_ms,
    }

def _selection_response(state: GameState, accepted: bool, feedback):
    return jsonify({
        "ok": True,
        "accepted": accepted,
        "feedback": feedback,
        "selection": state.selection.to_payload(),
        **_brief(state),
    })

def _rng_for(data: Dict[str, Any]) -> random.Random:
    seed = coerce_int(data.get("seed"))
    if seed is None:
        seed = current_app.config.get("GRID_SEED")
    return random.Random(seed)


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------
@bp.get("/api/difficulties")
def api_difficulties():
    return jsonify({
        "ok": True,
        "difficulties": [cfg.to_payload() for cfg in DIFFICULTY_CONFIGS.values()],
        "modes": list(GAME_MODES),
    })

@bp.post("/api/start")
@limiter.limit(lambda: current_app.config.get("GRID_START_LIMIT", "30 per minute"))
def api_start():
    data = _data()
    level = normalize_level(data.get("difficulty"))
    mode = normalize_mode(data.get("mode"))
    sid = _sid()

    try:
        state = initialize_game(
            level, mode,
            rng=_rng_for(data),
            now=now_ms(),
            max_attempts=int(current_app.config.get("GRID_MAX_ATTEMPTS", 10)),
            max_rebuilds=int(current_app.config.get("GRID_MAX_REBUILDS", 5)),
        )
    except GenerationExhaustedError as e:
        logger.error("grid generation exhausted for %s/%s: %s", level, mode, e)
        return _error("generation_exhausted", 503, message=str(e))

    get_store().put(sid, state)
    logger.info("session %s started %s/%s", sid, level, mode)

    resp = make_response(jsonify({"ok": True, "game": state_payload(state)}))
    if not request.cookies.get("session_id"):
        resp.set_cookie("session_id", cookie_part(sid), max_age=60 * 60 * 24 * 365, samesite="Lax")
    return resp

@bp.get("/api/state")
def api_state():
    state = _game()
    if state is None:
        return _no_game()
    return jsonify({"ok": True, "game": state_payload(state)})

@bp.post("/api/select_tile")
def api_select_tile():
    state = _game()
    if state is None:
        return _no_game()
    tile_id = coerce_int(_data().get("tile_id"))
    if tile_id is None:
        return _error("bad_tile_id", 400)
    if not state.is_playing:
        return _not_playing(state)
    accepted, feedback = select_tile(state, tile_id, now=_now())
    return _selection_response(state, accepted, feedback)

@bp.post("/api/select_operator")
def api_select_operator():
    state = _game()
    if state is None:
        return _no_game()
    instance = coerce_operator_instance(_data())
    if instance is None:
        return _error("bad_operator", 400)
    if not state.is_playing:
        return _not_playing(state)
    accepted, feedback = select_operator(state, instance, now=_now())
    return _selection_response(state, accepted, feedback)

@bp.post("/api/clear")
def api_clear():
    state = _game()
    if state is None:
        return _no_game()
    clear_selection(state)
    return _selection_response(state, True, None)

@bp.post("/api/swipe")
def api_swipe():
    state = _game()
    if state is None:
        return _no_game()
    data = _data()
    tile_ids = coerce_int_list(data.get("tile_ids"))
    operators = coerce_operator_list(data.get("operators"))
    if not tile_ids or operators is None:
        return _error("bad_swipe", 400)
    if not state.is_playing:
        return _not_playing(state)
    accepted, feedback = submit_swipe(state, tile_ids, operators, now=_now())
    return _selection_response(state, accepted, feedback)

@bp.post("/api/next")
def api_next():
    state = _game()
    if state is None:
        return _no_game()
    if not state.is_playing:
        return _not_playing(state)
    next_round(state, now=_now())
    return jsonify({"ok": True, "game": state_payload(state)})

@bp.post("/api/pause")
def api_pause():
    state = _game()
    if state is None:
        return _no_game()
    pause_game(state, now=_now())
    return jsonify({"ok": True, **_brief(state)})

@bp.post("/api/resume")
def api_resume():
    state = _game()
    if state is None:
        return _no_game()
    resume_game(state, now=_now())
    return jsonify({"ok": True, **_brief(state)})

@bp.post("/api/tick")
def api_tick():
    state = _game()
    if state is None:
        return _no_game()
    if not _server_clock():
        elapsed = coerce_int(_data().get("elapsed_ms"))
        elapsed = TICK_MS if elapsed is None else max(0, min(elapsed, MAX_TICK_MS))
        tick(state, elapsed)
    return jsonify({"ok": True, "round_time_ms": state.round_time_ms,
                    "total_time_ms": state.total_time_ms, **_brief(state)})

@bp.post("/api/hint")
def api_hint():
    state = _game()
    if state is None:
        return _no_game()
    if not state.is_playing:
        return _not_playing(state)
    hint = request_hint(state)
    return jsonify({"ok": True, "hint": hint.to_payload() if hint else None, **_brief(state)})

@bp.post("/api/restart")
def api_restart():
    state = _game()
    if state is None:
        return _no_game()
    try:
        state = reset_game(state, now=now_ms())
    except GenerationExhaustedError as e:
        return _error("generation_exhausted", 503, message=str(e))
    get_store().put(_sid(), state)
    return jsonify({"ok": True, "game": state_payload(state)})

@bp.get("/api/summary")
def api_summary():
    state = _game()
    if state is None:
        return _no_game()
    summary = state.playflow.summary(finalize=not state.is_playing)
    return jsonify({"ok": True, "summary": summary, **_brief(state),
                    "total_time_ms": state.total_time_ms,
                    "difficulty": state.difficulty.name, "mode": state.game_mode})
