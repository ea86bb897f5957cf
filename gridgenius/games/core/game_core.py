# gridgenius/games/core/game_core.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging
import math
import random

from .calculator import calculate_path_result, format_calculation
from .difficulty import (
    BASE_SCORE, CLASSIC, DIFFICULTY_MULTIPLIERS, MODE_MULTIPLIERS, TICK_MS,
    TIME_ATTACK, TIME_ATTACK_MS, TIME_ATTACK_ROUNDS,
    DifficultyConfig, get_config, normalize_mode,
)
from .grid_generator import (
    DEFAULT_MAX_ATTEMPTS, DEFAULT_MAX_REBUILDS,
    build_round_plan, find_hint, generate_targets, get_all_combinations,
)
from .models import GameCombination, OperatorInstance, Tile, mark_selected, reset_selected, tile_by_id
from .playflow import Playflow, now_ms
from .selection import SelectionState, SwipeTracker

logger = logging.getLogger(__name__)

PLAYING = "playing"
COMPLETED = "completed"
PAUSED = "paused"


# ============================================================
# Session state (one per player session; passed explicitly)
# ============================================================

@dataclass
class GameState:
    difficulty: DifficultyConfig
    game_mode: str
    grid: List[Tile]
    target_numbers: List[int]
    current_target: int
    current_round: int
    total_rounds: int
    score: int = 0
    game_status: str = PLAYING

    # timers (ms)
    started_at_ms: int = 0
    round_time_ms: int = 0
    total_time_ms: int = 0
    clock_ms: Optional[int] = None          # last clock sample while running
    time_attack_left_ms: Optional[int] = None
    time_attack_rounds_completed: Optional[int] = None

    selection: SelectionState = None        # type: ignore[assignment]
    swipe: SwipeTracker = None              # type: ignore[assignment]
    playflow: Playflow = field(default_factory=Playflow)
    last_feedback: Optional[Dict[str, Any]] = None

    rng: Any = field(default=None, repr=False)
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    max_rebuilds: int = DEFAULT_MAX_REBUILDS

    def __post_init__(self) -> None:
        if self.selection is None:
            self.selection = SelectionState(self.difficulty)
        if self.swipe is None:
            self.swipe = SwipeTracker(self.difficulty)
        if self.rng is None:
            self.rng = random.Random()

    @property
    def is_playing(self) -> bool:
        return self.game_status == PLAYING

    @property
    def round_solved(self) -> bool:
        cur = self.playflow.current
        return cur is not None and cur.solved


def new_game_state(
    difficulty,
    grid: Sequence[Tile],
    targets: Sequence[int],
    game_mode: str = CLASSIC,
    *,
    now: Optional[int] = None,
    rng=None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    max_rebuilds: int = DEFAULT_MAX_REBUILDS,
) -> GameState:
    """Start a session from an already-built grid and target list."""
    cfg = get_config(difficulty)
    mode = normalize_mode(game_mode)
    if not targets:
        raise ValueError("targets must not be empty")
    now = now_ms() if now is None else now
    time_attack = mode == TIME_ATTACK

    state = GameState(
        difficulty=cfg,
        game_mode=mode,
        grid=reset_selected(grid),
        target_numbers=list(targets),
        current_target=int(targets[0]),
        current_round=1,
        total_rounds=TIME_ATTACK_ROUNDS if time_attack else len(targets),
        started_at_ms=now,
        clock_ms=now,
        time_attack_left_ms=TIME_ATTACK_MS if time_attack else None,
        time_attack_rounds_completed=0 if time_attack else None,
        rng=rng,
        max_attempts=max_attempts,
        max_rebuilds=max_rebuilds,
    )
    state.playflow = Playflow(started_at_ms=now)
    state.playflow.start_round(1, state.current_target, at_ms=now)
    return state


def initialize_game(
    difficulty,
    game_mode: str = CLASSIC,
    *,
    rng=None,
    now: Optional[int] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    max_rebuilds: int = DEFAULT_MAX_REBUILDS,
) -> GameState:
    """
    Build a fresh grid + targets and start round 1.
    Raises GenerationExhaustedError when no grid yields any target.
    """
    cfg = get_config(difficulty)
    mode = normalize_mode(game_mode)
    rng = rng or random.Random()
    required = 1 if mode == TIME_ATTACK else cfg.total_rounds
    plan = build_round_plan(cfg, rng=rng, required=required,
                            max_attempts=max_attempts, max_rebuilds=max_rebuilds)
    for note in plan.notes:
        logger.warning("%s/%s: %s", cfg.name, mode, note)
    logger.info("new %s game (%s): %d combinations, targets=%s",
                cfg.name, mode, plan.combinations, plan.targets)
    return new_game_state(cfg, plan.grid, plan.targets, mode, now=now, rng=rng,
                          max_attempts=max_attempts, max_rebuilds=max_rebuilds)


def reset_game(state: GameState, *, now: Optional[int] = None) -> GameState:
    return initialize_game(state.difficulty, state.game_mode, rng=state.rng, now=now,
                           max_attempts=state.max_attempts, max_rebuilds=state.max_rebuilds)


# ============================================================
# Clock / timers
# ============================================================

def _advance(state: GameState, delta_ms: int) -> None:
    if delta_ms <= 0 or not state.is_playing:
        return
    state.round_time_ms += delta_ms
    state.total_time_ms += delta_ms
    if state.game_mode == TIME_ATTACK and state.time_attack_left_ms is not None:
        left = state.time_attack_left_ms - delta_ms
        if left <= 0:
            state.time_attack_left_ms = 0
            state.game_status = COMPLETED
            state.clock_ms = None
            clear_selection(state)
            state.playflow.finalize('time_up')
            logger.info("time attack finished: score=%d rounds=%s",
                        state.score, state.time_attack_rounds_completed)
        else:
            state.time_attack_left_ms = left


def sync_clock(state: GameState, now: Optional[int] = None) -> None:
    """Fold wall-clock time since the last sample into the timers."""
    now = now_ms() if now is None else now
    if state.clock_ms is not None and state.is_playing:
        _advance(state, now - state.clock_ms)
    if state.is_playing:
        state.clock_ms = now


def _maybe_sync(state: GameState, now: Optional[int]) -> None:
    # callers without a clock sample (tests, tick-driven UIs) leave timers alone
    if now is not None:
        sync_clock(state, now)


def tick(state: GameState, elapsed_ms: int = TICK_MS) -> None:
    """Fixed-interval UI tick."""
    _advance(state, int(elapsed_ms))


def start_round_timer(state: GameState, now: Optional[int] = None) -> None:
    state.round_time_ms = 0
    state.clock_ms = now_ms() if now is None else now


def update_timer(state: GameState, now: Optional[int] = None) -> None:
    sync_clock(state, now)


def stop_round_timer(state: GameState, now: Optional[int] = None) -> None:
    sync_clock(state, now)
    state.clock_ms = None


def time_attack_left(state: GameState) -> Optional[int]:
    return state.time_attack_left_ms


# ============================================================
# Status
# ============================================================

def pause_game(state: GameState, now: Optional[int] = None) -> None:
    if state.game_status != PLAYING:
        return
    _maybe_sync(state, now)
    state.game_status = PAUSED
    state.clock_ms = None
    clear_selection(state)


def resume_game(state: GameState, now: Optional[int] = None) -> None:
    if state.game_status != PAUSED:
        return
    state.game_status = PLAYING
    state.clock_ms = now


# ============================================================
# Scoring / submission
# ============================================================

def round_score(state: GameState) -> int:
    diff = DIFFICULTY_MULTIPLIERS.get(state.difficulty.name, 1)
    mode = MODE_MULTIPLIERS.get(state.game_mode, 1)
    return int(math.floor(BASE_SCORE * diff * mode))


def submit_solution(state: GameState, tiles: Sequence[Tile], operators: Sequence[str],
                    *, now: Optional[int] = None) -> bool:
    """
    Evaluate a finished path against the current target. A None result never matches.
    Always clears the in-progress selection; the caller advances rounds.
    A round that is already solved scores once only.
    """
    if not state.is_playing:
        return False
    _maybe_sync(state, now)
    if not state.is_playing:
        return False
    if state.round_solved:
        clear_selection(state)
        return False

    result = calculate_path_result(tiles, operators)
    correct = result is not None and result == state.current_target

    state.playflow.submit(correct, result, at_ms=now)
    state.last_feedback = {
        "calculation": format_calculation(tiles, operators),
        "result": result,
        "correct": correct,
        "target": state.current_target,
    }
    if correct:
        state.score += round_score(state)
        if state.game_mode == TIME_ATTACK:
            state.time_attack_rounds_completed = (state.time_attack_rounds_completed or 0) + 1
        logger.debug("round %d solved: %s = %s", state.current_round,
                     state.last_feedback["calculation"], result)
    clear_selection(state)
    return correct


def next_round(state: GameState, *, now: Optional[int] = None) -> None:
    _maybe_sync(state, now)
    if not state.is_playing:
        return

    if state.game_mode == TIME_ATTACK:
        combos = get_all_combinations(state.grid, state.difficulty)
        targets = generate_targets(combos, state.difficulty, rng=state.rng)
        if not targets:
            logger.warning("time attack: grid has no targets left; keeping target %d", state.current_target)
            return
        state.current_target = state.rng.choice(targets)
        state.target_numbers.append(state.current_target)
        _begin_round(state, state.current_round + 1, now)
        return

    if state.current_round >= state.total_rounds:
        state.game_status = COMPLETED
        state.clock_ms = None
        clear_selection(state)
        state.playflow.finalize('unsolved_exit', at_ms=now)
        logger.info("classic game finished: score=%d time_ms=%d", state.score, state.total_time_ms)
        return

    state.current_target = state.target_numbers[state.current_round]
    _begin_round(state, state.current_round + 1, now)


def _begin_round(state: GameState, round_no: int, now: Optional[int]) -> None:
    state.current_round = round_no
    state.grid = reset_selected(state.grid)
    clear_selection(state)
    state.round_time_ms = 0
    state.playflow.start_round(round_no, state.current_target, at_ms=now)


# ============================================================
# Selection (tap and drag)
# ============================================================

def clear_selection(state: GameState) -> None:
    state.selection.clear_selection()
    state.swipe.cancel()
    state.grid = reset_selected(state.grid)


def _after_selection_change(state: GameState, now: Optional[int]) -> Optional[Dict[str, Any]]:
    sel = state.selection
    state.grid = mark_selected(state.grid, (t.id for t in sel.selected_tiles))
    if not sel.is_complete():
        return None
    submit_solution(state, list(sel.selected_tiles), sel.operators, now=now)
    return dict(state.last_feedback or {}, complete=True)


def select_tile(state: GameState, tile_id: int, *, now: Optional[int] = None) -> Tuple[bool, Optional[Dict[str, Any]]]:
    """
    Returns (accepted, feedback). feedback is set only when the tap completed the path,
    in which case it has already been submitted. Taps after a solve wait for next_round.
    """
    if not state.is_playing or state.round_solved:
        return False, None
    tile = tile_by_id(state.grid, tile_id)
    if tile is None:
        return False, None
    if not state.selection.attempt_select_tile(tile):
        return False, None
    return True, _after_selection_change(state, now)


def select_operator(state: GameState, instance: OperatorInstance, *,
                    now: Optional[int] = None) -> Tuple[bool, Optional[Dict[str, Any]]]:
    if not state.is_playing or state.round_solved:
        return False, None
    if not state.selection.attempt_select_operator(instance):
        return False, None
    return True, _after_selection_change(state, now)


def submit_swipe(state: GameState, tile_ids: Sequence[int], operators: Sequence[OperatorInstance],
                 *, now: Optional[int] = None) -> Tuple[bool, Optional[Dict[str, Any]]]:
    """
    Replay a drag gesture: tiles in visit order plus the operator crossed in each gap.
    Returns (accepted, feedback); a path that isn't a complete straight run is rejected.
    """
    if not state.is_playing or state.round_solved or not tile_ids:
        return False, None
    tiles = [tile_by_id(state.grid, int(i)) for i in tile_ids]
    if any(t is None for t in tiles):
        return False, None

    sw = state.swipe
    sw.begin(tiles[0])
    for i, t in enumerate(tiles[1:]):
        if not sw.extend(t):
            sw.cancel()
            return False, None
        if i < len(operators) and not sw.note_operator(operators[i]):
            sw.cancel()
            return False, None

    finished = sw.finish()
    if finished is None:
        return False, None
    path, ops = finished
    state.selection.clear_selection()
    submit_solution(state, path, ops, now=now)
    return True, dict(state.last_feedback or {}, complete=True)


# ============================================================
# Hints
# ============================================================

def request_hint(state: GameState) -> Optional[GameCombination]:
    if not state.is_playing:
        return None
    hint = find_hint(state.grid, state.difficulty, state.current_target)
    if hint is not None:
        state.playflow.help()
    return hint


# ============================================================
# Readout
# ============================================================

def state_payload(state: GameState) -> Dict[str, Any]:
    cfg = state.difficulty
    return {
        "difficulty": cfg.name,
        "config": cfg.to_payload(),
        "mode": state.game_mode,
        "status": state.game_status,
        "grid": [t.to_payload() for t in state.grid],
        "grid_size": cfg.grid_size,
        "target": state.current_target,
        "round": state.current_round,
        "total_rounds": state.total_rounds,
        "score": state.score,
        "round_time_ms": state.round_time_ms,
        "total_time_ms": state.total_time_ms,
        "time_attack_left_ms": state.time_attack_left_ms,
        "time_attack_rounds_completed": state.time_attack_rounds_completed,
        "selection": state.selection.to_payload(),
        "last_feedback": state.last_feedback,
    }


__all__ = [
    "PLAYING", "COMPLETED", "PAUSED",
    "GameState", "new_game_state", "initialize_game", "reset_game",
    "sync_clock", "tick", "start_round_timer", "update_timer", "stop_round_timer", "time_attack_left",
    "pause_game", "resume_game",
    "round_score", "submit_solution", "next_round",
    "clear_selection", "select_tile", "select_operator", "submit_swipe",
    "request_hint", "state_payload",
]
