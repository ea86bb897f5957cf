from itertools import product

import pytest

from gridgenius.games.core.calculator import (
    are_tiles_adjacent,
    calculate_path_result,
    format_calculation,
    is_valid_path,
    tiles_between,
)
from gridgenius.games.core.models import Position, Tile, grid_from_rows


def _t(row, col, value=1):
    return Tile(id=row * 5 + col, value=value, position=Position(row, col))


# ==============================================================================
# Evaluator
# ==============================================================================

def test_two_tile_results_match_plain_arithmetic():
    ops = {"+": lambda a, b: a + b, "-": lambda a, b: a - b, "*": lambda a, b: a * b}
    for a, b, op in product(range(1, 10), range(1, 10), ops):
        assert calculate_path_result([a, b], [op]) == ops[op](a, b)


def test_three_tiles_evaluate_left_to_right():
    assert calculate_path_result([4, 7, 10], ["-", "+"]) == 7
    # no precedence: (2 + 3) * 4, not 2 + 12
    assert calculate_path_result([2, 3, 4], ["+", "*"]) == 20


def test_accepts_tiles():
    tiles = [_t(0, 0, 6), _t(0, 1, 3), _t(0, 2, 2)]
    assert calculate_path_result(tiles, ["-", "*"]) == 6


def test_generalizes_to_longer_paths():
    assert calculate_path_result([1, 2, 3, 4], ["+", "*", "-"]) == 5


@pytest.mark.parametrize("values,ops", [
    ([1, 2], []),
    ([1, 2], ["+", "+"]),
    ([1, 2, 3], ["+"]),
    ([], []),
    ([1, 2], ["/"]),
    ([1, 2, 3], ["+", "^"]),
])
def test_invalid_input_returns_none(values, ops):
    assert calculate_path_result(values, ops) is None


def test_format_calculation():
    assert format_calculation([4, 7, 10], ["-", "+"]) == "4 - 7 + 10"
    assert format_calculation([4, 7], ["-"]) == "4 - 7"
    assert format_calculation([4], []) == "4"


# ==============================================================================
# Path validation
# ==============================================================================

def test_straight_runs_are_valid():
    assert is_valid_path([_t(0, 0), _t(0, 1), _t(0, 2)])
    assert is_valid_path([_t(2, 1), _t(1, 1), _t(0, 1)])
    assert is_valid_path([_t(3, 3), _t(3, 2)])


def test_single_tile_is_not_a_path():
    assert not is_valid_path([_t(0, 0)])
    assert not is_valid_path([])


def test_l_shape_is_invalid():
    assert not is_valid_path([_t(0, 0), _t(0, 1), _t(1, 1)])


def test_gap_is_invalid():
    assert not is_valid_path([_t(0, 0), _t(0, 2)])


def test_diagonal_is_invalid():
    assert not is_valid_path([_t(0, 0), _t(1, 1)])


def test_revisit_is_invalid():
    assert not is_valid_path([_t(0, 0), _t(1, 0), _t(0, 0)])
    assert not is_valid_path([_t(0, 0), _t(0, 1), _t(0, 0)])


def test_validator_does_not_mutate_input():
    path = [_t(0, 2), _t(0, 1), _t(0, 0)]
    before = list(path)
    assert is_valid_path(path)
    assert path == before


def test_adjacency():
    assert are_tiles_adjacent(_t(1, 1), _t(1, 2))
    assert are_tiles_adjacent(_t(1, 1), _t(0, 1))
    assert not are_tiles_adjacent(_t(1, 1), _t(2, 2))
    assert not are_tiles_adjacent(_t(1, 1), _t(1, 1))


def test_tiles_between():
    grid = grid_from_rows([[1, 2, 3], [4, 5, 6], [7, 8, 9]])
    assert [t.id for t in tiles_between(grid[0], grid[2], grid)] == [0, 1, 2]
    assert [t.id for t in tiles_between(grid[8], grid[2], grid)] == [8, 5, 2]
    assert tiles_between(grid[0], grid[4], grid) == []
