# gridgenius/games/core/grid_generator.py
from __future__ import annotations
from dataclasses import dataclass, field
from itertools import product
from typing import Iterator, List, Optional, Sequence, Tuple
import logging
import random

from .calculator import calculate_path_result
from .difficulty import MIN_NUMBER, MAX_NUMBER, get_config
from .models import GameCombination, Position, Tile

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_MAX_REBUILDS = 5


class GenerationExhaustedError(RuntimeError):
    """No grid produced any usable target within the rebuild cap."""


# ============================================================
# Grid generation
# ============================================================

def generate_grid(difficulty, rng=None) -> List[Tile]:
    """Raw candidate grid: independent values in [MIN_NUMBER, MAX_NUMBER], row-major ids."""
    cfg = get_config(difficulty)
    rng = rng or random
    n = cfg.grid_size
    return [
        Tile(id=i, value=rng.randint(MIN_NUMBER, MAX_NUMBER), position=Position(i // n, i % n))
        for i in range(n * n)
    ]


# ============================================================
# Exhaustive search (shared by enumeration, the validity gate and hints)
# ============================================================

def iter_runs(grid: Sequence[Tile], grid_size: int, length: int) -> Iterator[Tuple[Tile, ...]]:
    """
    Every straight run of `length` tiles: all horizontal runs row-major,
    then all vertical runs row-major.
    """
    n = grid_size
    for row in range(n):
        for col in range(n - length + 1):
            yield tuple(grid[row * n + col + k] for k in range(length))
    for row in range(n - length + 1):
        for col in range(n):
            yield tuple(grid[(row + k) * n + col] for k in range(length))


def iter_combinations(grid: Sequence[Tile], difficulty, *, apply_range: bool = True) -> Iterator[GameCombination]:
    """
    Walk every run x every operator assignment (with repetition), in a stable order.
    With apply_range, only non-negative results inside the target range are yielded.
    """
    cfg = get_config(difficulty)
    if len(grid) != cfg.grid_size * cfg.grid_size:
        raise ValueError(f"grid has {len(grid)} tiles, expected {cfg.grid_size ** 2}")
    for run in iter_runs(grid, cfg.grid_size, cfg.tiles_count):
        for ops in product(cfg.available_operators, repeat=cfg.operators_count):
            result = calculate_path_result(run, ops)
            if result is None:
                continue
            if apply_range and (result < 0 or result not in cfg.target_range):
                continue
            yield GameCombination(tiles=run, operators=tuple(ops), result=result)


def get_all_combinations(grid: Sequence[Tile], difficulty) -> List[GameCombination]:
    return list(iter_combinations(grid, difficulty))


def validate_grid_has_solutions(grid: Sequence[Tile], difficulty) -> bool:
    cfg = get_config(difficulty)
    needed = cfg.total_rounds
    for i, _ in enumerate(iter_combinations(grid, cfg), start=1):
        if i >= needed:
            return True
    return False


def generate_valid_grid(difficulty, max_attempts: int = DEFAULT_MAX_ATTEMPTS, rng=None) -> List[Tile]:
    """
    Up to max_attempts candidates; the first that passes the solution-count gate wins.
    Otherwise the last candidate is returned as-is (possibly under-supplied).
    """
    cfg = get_config(difficulty)
    grid: List[Tile] = []
    for attempt in range(1, max(1, int(max_attempts)) + 1):
        grid = generate_grid(cfg, rng=rng)
        if validate_grid_has_solutions(grid, cfg):
            if attempt > 1:
                logger.debug("valid %s grid after %d attempts", cfg.name, attempt)
            return grid
    logger.warning("no %s grid passed the solution gate after %d attempts; using last candidate",
                   cfg.name, max_attempts)
    return grid


# ============================================================
# Target selection
# ============================================================

def _same_combo(a: GameCombination, b: GameCombination) -> bool:
    return a.result == b.result and a.tile_ids == b.tile_ids


def generate_targets(combinations: Sequence[GameCombination], difficulty, rng=None) -> List[int]:
    """
    Pick total_rounds target values:
      1) mixed-operator combinations first (shuffled),
      2) then same-operator ones (shuffled),
      3) then anything not yet picked.
    The final list is shuffled again. [] means "regenerate the grid".
    """
    cfg = get_config(difficulty)
    rng = rng or random
    total = cfg.total_rounds

    if not combinations:
        logger.warning("no valid combinations for %s grid; caller should regenerate", cfg.name)
        return []

    mixed = [c for c in combinations if c.is_mixed]
    same = [c for c in combinations if not c.is_mixed]

    rng.shuffle(mixed)
    selected: List[GameCombination] = mixed[:total]

    if len(selected) < total:
        rng.shuffle(same)
        selected.extend(same[:total - len(selected)])

    if len(selected) < total:
        remaining = [c for c in combinations
                     if not any(_same_combo(s, c) for s in selected)]
        rng.shuffle(remaining)
        selected.extend(remaining[:total - len(selected)])

    targets = [c.result for c in selected]
    rng.shuffle(targets)
    return targets


# ============================================================
# Hints
# ============================================================

def find_solutions(grid: Sequence[Tile], difficulty, target: int, limit: Optional[int] = None) -> List[GameCombination]:
    out: List[GameCombination] = []
    for combo in iter_combinations(grid, difficulty, apply_range=False):
        if combo.result == target:
            out.append(combo)
            if limit is not None and len(out) >= limit:
                break
    return out


def find_hint(grid: Sequence[Tile], difficulty, target: int) -> Optional[GameCombination]:
    found = find_solutions(grid, difficulty, target, limit=1)
    return found[0] if found else None


# ============================================================
# Round plan (grid + targets) with a hard rebuild cap
# ============================================================

@dataclass
class RoundPlan:
    grid: List[Tile]
    targets: List[int]
    combinations: int = 0
    rebuilds: int = 0
    notes: List[str] = field(default_factory=list)


def build_round_plan(
    difficulty,
    *,
    rng=None,
    required: Optional[int] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    max_rebuilds: int = DEFAULT_MAX_REBUILDS,
) -> RoundPlan:
    """
    Grid + targets for a session. Rebuilds from scratch until at least `required`
    targets exist (default: total_rounds), at most max_rebuilds times.
    Falls back to the longest non-empty plan; raises GenerationExhaustedError
    if every attempt came back empty.
    """
    cfg = get_config(difficulty)
    need = cfg.total_rounds if required is None else max(1, int(required))
    best: Optional[RoundPlan] = None

    for rebuild in range(max(1, int(max_rebuilds))):
        grid = generate_valid_grid(cfg, max_attempts=max_attempts, rng=rng)
        combos = get_all_combinations(grid, cfg)
        targets = generate_targets(combos, cfg, rng=rng)
        plan = RoundPlan(grid=grid, targets=targets, combinations=len(combos), rebuilds=rebuild)
        if len(targets) >= need:
            return plan
        logger.warning("%s plan produced %d/%d targets (rebuild %d/%d)",
                       cfg.name, len(targets), need, rebuild + 1, max_rebuilds)
        if targets and (best is None or len(targets) > len(best.targets)):
            best = plan

    if best is None:
        raise GenerationExhaustedError(
            f"could not generate any {cfg.name} targets after {max_rebuilds} rebuilds"
        )
    best.notes.append(f"under-supplied: {len(best.targets)} of {need} targets")
    return best


__all__ = [
    "GenerationExhaustedError", "RoundPlan",
    "generate_grid", "iter_runs", "iter_combinations", "get_all_combinations",
    "validate_grid_has_solutions", "generate_valid_grid", "generate_targets",
    "find_solutions", "find_hint", "build_round_plan",
    "DEFAULT_MAX_ATTEMPTS", "DEFAULT_MAX_REBUILDS",
]
