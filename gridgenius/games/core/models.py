# gridgenius/games/core/models.py
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
import math

from .difficulty import HORIZONTAL, VERTICAL, ALL_OPERATORS


@dataclass(frozen=True)
class Position:
    row: int
    col: int


@dataclass(frozen=True)
class Tile:
    """
    One numeric cell. id == row * grid_size + col.
    `selected` is a display flag only; the session resets it every round.
    """
    id: int
    value: int
    position: Position
    selected: bool = False

    @property
    def row(self) -> int:
        return self.position.row

    @property
    def col(self) -> int:
        return self.position.col

    def to_payload(self) -> Dict[str, Any]:
        return {"id": self.id, "value": self.value,
                "row": self.row, "col": self.col, "selected": self.selected}


@dataclass(frozen=True)
class OperatorInstance:
    """
    One operator symbol placed at a grid slot.

    A horizontal slot at (row, col) sits between tiles (row, col) and (row, col+1);
    a vertical slot at (row, col) sits between (row, col) and (row+1, col).
    Every symbol at every slot is its own instance.
    """
    row: int
    col: int
    orientation: str
    operator: str

    def __post_init__(self) -> None:
        if self.orientation not in (HORIZONTAL, VERTICAL):
            raise ValueError(f"orientation must be {HORIZONTAL!r} or {VERTICAL!r}")

    @property
    def slot(self) -> Tuple[int, int, str]:
        return (self.row, self.col, self.orientation)

    def endpoints(self) -> Tuple[Position, Position]:
        if self.orientation == HORIZONTAL:
            return Position(self.row, self.col), Position(self.row, self.col + 1)
        return Position(self.row, self.col), Position(self.row + 1, self.col)

    def touches(self, pos: Position) -> bool:
        return pos in self.endpoints()

    def other_end(self, pos: Position) -> Optional[Position]:
        a, b = self.endpoints()
        if pos == a:
            return b
        if pos == b:
            return a
        return None

    def to_payload(self) -> Dict[str, Any]:
        return {"row": self.row, "col": self.col,
                "orientation": self.orientation, "operator": self.operator}


@dataclass(frozen=True)
class GameCombination:
    tiles: Tuple[Tile, ...]
    operators: Tuple[str, ...]
    result: int

    @property
    def tile_ids(self) -> Tuple[int, ...]:
        return tuple(t.id for t in self.tiles)

    @property
    def is_mixed(self) -> bool:
        """Single-operator runs count as mixed; otherwise the symbols must not all match."""
        if len(self.operators) <= 1:
            return True
        return len(set(self.operators)) > 1

    def to_payload(self) -> Dict[str, Any]:
        return {"tile_ids": list(self.tile_ids),
                "values": [t.value for t in self.tiles],
                "operators": list(self.operators),
                "result": self.result}


# ============================================================
# Grid helpers (grid is a flat, row-major list of tiles)
# ============================================================

def grid_size_of(grid: Sequence[Tile]) -> int:
    n = int(math.isqrt(len(grid)))
    if n * n != len(grid):
        raise ValueError(f"grid of {len(grid)} tiles is not square")
    return n


def tile_at(grid: Sequence[Tile], row: int, col: int) -> Optional[Tile]:
    n = grid_size_of(grid)
    if 0 <= row < n and 0 <= col < n:
        return grid[row * n + col]
    return None


def tile_by_id(grid: Sequence[Tile], tile_id: int) -> Optional[Tile]:
    if 0 <= tile_id < len(grid):
        return grid[tile_id]
    return None


def grid_rows(grid: Sequence[Tile]) -> List[List[int]]:
    n = grid_size_of(grid)
    return [[grid[r * n + c].value for c in range(n)] for r in range(n)]


def grid_from_rows(rows: Sequence[Sequence[int]]) -> List[Tile]:
    """Build a grid from literal values, e.g. [[1, 2], [3, 4]]."""
    n = len(rows)
    if any(len(r) != n for r in rows):
        raise ValueError("rows must form a square")
    return [Tile(id=r * n + c, value=int(rows[r][c]), position=Position(r, c))
            for r in range(n) for c in range(n)]


def reset_selected(grid: Iterable[Tile]) -> List[Tile]:
    return [t if not t.selected else replace(t, selected=False) for t in grid]


def mark_selected(grid: Iterable[Tile], tile_ids: Iterable[int]) -> List[Tile]:
    ids = set(tile_ids)
    return [replace(t, selected=(t.id in ids)) if t.selected != (t.id in ids) else t for t in grid]


def operator_slots(grid_size: int, operators: Sequence[str] = ALL_OPERATORS) -> List[OperatorInstance]:
    """Every operator instance a board of this size renders, row-major, horizontal first."""
    out: List[OperatorInstance] = []
    for row in range(grid_size):
        for col in range(grid_size):
            if col < grid_size - 1:
                out.extend(OperatorInstance(row, col, HORIZONTAL, op) for op in operators)
            if row < grid_size - 1:
                out.extend(OperatorInstance(row, col, VERTICAL, op) for op in operators)
    return out


__all__ = [
    "Position", "Tile", "OperatorInstance", "GameCombination",
    "grid_size_of", "tile_at", "tile_by_id", "grid_rows", "grid_from_rows",
    "reset_selected", "mark_selected", "operator_slots",
]
