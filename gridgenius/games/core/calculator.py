# gridgenius/games/core/calculator.py
from __future__ import annotations
from typing import Callable, Dict, List, Optional, Sequence, Union
import logging

from .models import Tile, tile_at

logger = logging.getLogger(__name__)

_OPS: Dict[str, Callable[[int, int], int]] = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
}

Operand = Union[Tile, int]


def _value(x: Operand) -> int:
    return x.value if isinstance(x, Tile) else int(x)


def apply_operator(a: int, op: str, b: int) -> Optional[int]:
    fn = _OPS.get(op)
    if fn is None:
        return None
    return fn(a, b)


def calculate_path_result(tiles: Sequence[Operand], operators: Sequence[str]) -> Optional[int]:
    """
    Strict left-to-right evaluation, no precedence:
      (4, '-', 7, '+', 10) -> (4 - 7) + 10 = 7
    Returns None when the shapes don't line up or an operator is unknown.
    Accepts tiles or plain ints.
    """
    if not tiles or len(operators) != len(tiles) - 1:
        return None
    result = _value(tiles[0])
    for op, nxt in zip(operators, tiles[1:]):
        result = apply_operator(result, op, _value(nxt))
        if result is None:
            logger.debug("invalid operator %r in path", op)
            return None
    return result


# ============================================================
# Path validation
# ============================================================

def are_tiles_adjacent(a: Tile, b: Tile) -> bool:
    """Edge neighbours only (no diagonals)."""
    dr = abs(a.row - b.row)
    dc = abs(a.col - b.col)
    return (dr == 0 and dc == 1) or (dr == 1 and dc == 0)


def is_valid_path(tiles: Sequence[Tile]) -> bool:
    """
    A legal straight-line run: at least two tiles, each step an edge neighbour,
    and (for 3+) a single row or column with consecutive coordinates.
    """
    if len(tiles) < 2:
        return False

    for cur, nxt in zip(tiles, tiles[1:]):
        if not are_tiles_adjacent(cur, nxt):
            return False

    if len(tiles) > 2:
        horizontal = all(t.row == tiles[0].row for t in tiles)
        vertical = all(t.col == tiles[0].col for t in tiles)
        if not horizontal and not vertical:
            return False
        axis = sorted(t.col for t in tiles) if horizontal else sorted(t.row for t in tiles)
        if any(b - a != 1 for a, b in zip(axis, axis[1:])):
            return False

    return True


def tiles_between(start: Tile, end: Tile, grid: Sequence[Tile]) -> List[Tile]:
    """
    Inclusive straight run from start to end; [] if they don't share a row or column.
    """
    dr = end.row - start.row
    dc = end.col - start.col
    if dr != 0 and dc != 0:
        return []
    if dr == 0 and dc == 0:
        return [start]
    step_r = (dr > 0) - (dr < 0)
    step_c = (dc > 0) - (dc < 0)
    path = [start]
    r, c = start.row + step_r, start.col + step_c
    while (r, c) != (end.row, end.col):
        t = tile_at(grid, r, c)
        if t is not None:
            path.append(t)
        r, c = r + step_r, c + step_c
    path.append(end)
    return path


def format_calculation(tiles: Sequence[Operand], operators: Sequence[str]) -> str:
    parts: List[str] = []
    for i, t in enumerate(tiles):
        parts.append(str(_value(t)))
        if i < len(operators):
            parts.append(operators[i])
    return " ".join(parts)


__all__ = [
    "apply_operator", "calculate_path_result",
    "are_tiles_adjacent", "is_valid_path", "tiles_between", "format_calculation",
]
