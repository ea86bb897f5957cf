# gridgenius/games/core/selection.py
from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple
import logging

from .calculator import calculate_path_result, format_calculation, is_valid_path
from .difficulty import get_config
from .models import OperatorInstance, Position, Tile

logger = logging.getLogger(__name__)


def _probe(pos: Position) -> Tile:
    # value/id are irrelevant to geometry checks
    return Tile(id=-1, value=0, position=pos)


class SelectionState:
    """
    Tap-by-tap path builder: tile, operator, tile, operator, tile ...

    Every attempt returns True (state changed) or False (rejected, nothing changed).
    Re-selecting something already in the path removes it and everything after it.
    """

    def __init__(self, difficulty):
        self.config = get_config(difficulty)
        self._tiles: List[Tile] = []
        self._ops: List[OperatorInstance] = []

    # ---- read access ----
    @property
    def selected_tiles(self) -> Tuple[Tile, ...]:
        return tuple(self._tiles)

    @property
    def selected_operator_instances(self) -> Tuple[OperatorInstance, ...]:
        return tuple(self._ops)

    @property
    def operators(self) -> List[str]:
        return [o.operator for o in self._ops]

    @property
    def is_tile_turn(self) -> bool:
        return len(self._tiles) == len(self._ops)

    @property
    def is_empty(self) -> bool:
        return not self._tiles and not self._ops

    def is_complete(self) -> bool:
        return (len(self._tiles) == self.config.tiles_count
                and len(self._ops) == self.config.operators_count)

    @property
    def result(self) -> Optional[int]:
        """Evaluated value once complete, otherwise None."""
        if not self.is_complete():
            return None
        return calculate_path_result(self._tiles, self.operators)

    @property
    def partial_result(self) -> Optional[int]:
        """Running value for live feedback (ignores a dangling operator)."""
        if not self._tiles:
            return None
        return calculate_path_result(self._tiles, self.operators[:len(self._tiles) - 1])

    @property
    def calculation(self) -> str:
        return format_calculation(self._tiles, self.operators)

    # ---- transitions ----
    def clear_selection(self) -> None:
        self._tiles = []
        self._ops = []

    def attempt_select_tile(self, tile: Tile) -> bool:
        for idx, t in enumerate(self._tiles):
            if t.id == tile.id:
                # toggle off: drop this tile and everything picked after it
                self._tiles = self._tiles[:idx]
                self._ops = self._ops[:idx]
                return True

        if self.is_complete():
            return self._reject("tile", tile.id, "selection complete")
        if not self.is_tile_turn:
            return self._reject("tile", tile.id, "operator turn")
        if not self._tiles:
            self._tiles.append(tile)
            return True

        last = self._tiles[-1]
        if len(self._ops) == len(self._tiles):
            pending = self._ops[-1]
            if pending.other_end(last.position) != tile.position:
                return self._reject("tile", tile.id, "not the tile the pending operator points to")

        if not is_valid_path(self._tiles + [tile]):
            return self._reject("tile", tile.id, "not a straight adjacent run")

        self._tiles.append(tile)
        return True

    def attempt_select_operator(self, instance: OperatorInstance) -> bool:
        for idx, o in enumerate(self._ops):
            if o == instance:
                # operator idx follows tile idx; keep tiles up to and including it
                self._tiles = self._tiles[:idx + 1]
                self._ops = self._ops[:idx]
                return True

        if not self._tiles:
            return self._reject("operator", instance, "no tile selected yet")
        if self.is_complete():
            return self._reject("operator", instance, "selection complete")
        if self.is_tile_turn:
            return self._reject("operator", instance, "tile turn")
        if instance.operator not in self.config.available_operators:
            return self._reject("operator", instance, "operator not available at this level")

        last = self._tiles[-1]
        other = instance.other_end(last.position)
        if other is None:
            return self._reject("operator", instance, "slot not adjacent to last tile")

        n = self.config.grid_size
        if not (0 <= other.row < n and 0 <= other.col < n):
            return self._reject("operator", instance, "slot leads off the grid")
        if any(t.position == other for t in self._tiles):
            return self._reject("operator", instance, "slot leads back into the path")
        if not is_valid_path(self._tiles + [_probe(other)]):
            return self._reject("operator", instance, "slot would bend the path")

        self._ops.append(instance)
        return True

    def _reject(self, kind: str, what, why: str) -> bool:
        logger.debug("rejected %s %s: %s", kind, what, why)
        return False

    # ---- readout ----
    def to_payload(self) -> Dict[str, Any]:
        return {
            "tile_ids": [t.id for t in self._tiles],
            "operators": [o.to_payload() for o in self._ops],
            "turn": "tile" if self.is_tile_turn else "operator",
            "complete": self.is_complete(),
            "calculation": self.calculation,
            "partial_result": self.partial_result,
        }


class SwipeTracker:
    """
    Drag-gesture path builder. The input layer reports tiles and operator
    instances under the pointer; the tracker keeps only straight runs.
    """

    def __init__(self, difficulty):
        self.config = get_config(difficulty)
        self.active = False
        self.path: List[Tile] = []
        self.gap_ops: List[Optional[OperatorInstance]] = []

    @property
    def operators(self) -> List[Optional[str]]:
        return [o.operator if o else None for o in self.gap_ops]

    @property
    def result(self) -> Optional[int]:
        ops = self.operators
        if any(o is None for o in ops):
            return None
        return calculate_path_result(self.path, ops)

    def begin(self, tile: Tile) -> None:
        self.active = True
        self.path = [tile]
        self.gap_ops = []

    def extend(self, tile: Tile) -> bool:
        if not self.active:
            return False
        for idx, t in enumerate(self.path):
            if t.id == tile.id:
                self.path = self.path[:idx + 1]
                self.gap_ops = self.gap_ops[:idx]
                return True
        if len(self.path) >= self.config.tiles_count:
            return False
        if not is_valid_path(self.path + [tile]):
            return False
        self.path.append(tile)
        self.gap_ops.append(None)
        return True

    def note_operator(self, instance: OperatorInstance) -> bool:
        """Bind an operator to the gap between the last two tiles, if it sits there."""
        if not self.active or len(self.path) < 2:
            return False
        if instance.operator not in self.config.available_operators:
            return False
        a, b = self.path[-2], self.path[-1]
        if set(instance.endpoints()) != {a.position, b.position}:
            return False
        self.gap_ops[-1] = instance
        return True

    def is_complete(self) -> bool:
        return (len(self.path) == self.config.tiles_count
                and all(o is not None for o in self.gap_ops)
                and is_valid_path(self.path))

    def finish(self) -> Optional[Tuple[List[Tile], List[str]]]:
        out = None
        if self.active and self.is_complete():
            out = (list(self.path), [o.operator for o in self.gap_ops])
        self.cancel()
        return out

    def cancel(self) -> None:
        self.active = False
        self.path = []
        self.gap_ops = []


__all__ = ["SelectionState", "SwipeTracker"]
