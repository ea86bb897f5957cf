from gridgenius.games.core.difficulty import DIFFICULTY_CONFIGS, HORIZONTAL, VERTICAL
from gridgenius.games.core.models import OperatorInstance
from gridgenius.games.core.selection import SelectionState, SwipeTracker


def h(row, col, op):
    return OperatorInstance(row, col, HORIZONTAL, op)


def v(row, col, op):
    return OperatorInstance(row, col, VERTICAL, op)


def _snapshot(sel):
    return sel.selected_tiles, sel.selected_operator_instances


# ==============================================================================
# Alternation
# ==============================================================================

def test_operator_before_any_tile_is_rejected(line_config):
    sel = SelectionState(line_config)
    assert sel.attempt_select_operator(h(0, 0, "+")) is False
    assert sel.is_empty


def test_first_tile_can_be_anywhere(line_config, line_grid):
    sel = SelectionState(line_config)
    assert sel.attempt_select_tile(line_grid[4])
    assert [t.id for t in sel.selected_tiles] == [4]


def test_second_tile_without_operator_is_rejected(line_config, line_grid):
    sel = SelectionState(line_config)
    sel.attempt_select_tile(line_grid[0])
    assert sel.attempt_select_tile(line_grid[1]) is False
    assert [t.id for t in sel.selected_tiles] == [0]


def test_reselecting_only_tile_deselects_it(line_config, line_grid):
    sel = SelectionState(line_config)
    sel.attempt_select_tile(line_grid[0])
    assert sel.attempt_select_tile(line_grid[0]) is True
    assert sel.is_empty


def test_operator_on_tile_turn_is_rejected(line_config, line_grid):
    sel = SelectionState(line_config)
    sel.attempt_select_tile(line_grid[0])
    assert sel.attempt_select_operator(h(0, 0, "+"))
    assert sel.attempt_select_operator(v(0, 0, "-")) is False


# ==============================================================================
# Full paths
# ==============================================================================

def test_horizontal_three_tile_path_completes(line_config, line_grid):
    sel = SelectionState(line_config)
    assert sel.attempt_select_tile(line_grid[0])        # 4
    assert sel.attempt_select_operator(h(0, 0, "-"))
    assert sel.attempt_select_tile(line_grid[1])        # 7
    assert not sel.is_complete()
    assert sel.result is None
    assert sel.partial_result == -3
    assert sel.attempt_select_operator(h(0, 1, "+"))
    assert sel.attempt_select_tile(line_grid[2])        # 1
    assert sel.is_complete()
    assert sel.operators == ["-", "+"]
    assert sel.result == (4 - 7) + 1
    assert sel.calculation == "4 - 7 + 1"


def test_vertical_path_upwards(line_config, line_grid):
    sel = SelectionState(line_config)
    assert sel.attempt_select_tile(line_grid[7])        # (2,1) = 6
    assert sel.attempt_select_operator(v(1, 1, "*"))    # between (1,1) and (2,1)
    assert sel.attempt_select_tile(line_grid[4])        # (1,1) = 5
    assert sel.attempt_select_operator(v(0, 1, "-"))
    assert sel.attempt_select_tile(line_grid[1])        # (0,1) = 7
    assert sel.result == 6 * 5 - 7


def test_leftward_operator_picks_left_neighbour(line_config, line_grid):
    sel = SelectionState(line_config)
    sel.attempt_select_tile(line_grid[2])
    assert sel.attempt_select_operator(h(0, 1, "+"))
    assert sel.attempt_select_tile(line_grid[0]) is False   # not the slot's other end
    assert sel.attempt_select_tile(line_grid[1]) is True


def test_nothing_more_once_complete(line_config, line_grid):
    sel = SelectionState(line_config)
    for step in (line_grid[3], h(1, 0, "+"), line_grid[4], h(1, 1, "+"), line_grid[5]):
        ok = sel.attempt_select_tile(step) if hasattr(step, "value") else sel.attempt_select_operator(step)
        assert ok
    before = _snapshot(sel)
    assert sel.attempt_select_tile(line_grid[0]) is False
    assert sel.attempt_select_operator(v(1, 2, "+")) is False
    assert _snapshot(sel) == before


# ==============================================================================
# Rejections leave state untouched
# ==============================================================================

def test_tile_must_match_pending_operator(line_config, line_grid):
    sel = SelectionState(line_config)
    sel.attempt_select_tile(line_grid[0])
    sel.attempt_select_operator(h(0, 0, "+"))
    before = _snapshot(sel)
    assert sel.attempt_select_tile(line_grid[3]) is False   # below, operator points right
    assert _snapshot(sel) == before


def test_operator_not_touching_last_tile(line_config, line_grid):
    sel = SelectionState(line_config)
    sel.attempt_select_tile(line_grid[0])
    assert sel.attempt_select_operator(h(1, 1, "+")) is False


def test_operator_that_would_bend_the_path(line_config, line_grid):
    sel = SelectionState(line_config)
    sel.attempt_select_tile(line_grid[0])
    sel.attempt_select_operator(h(0, 0, "+"))
    sel.attempt_select_tile(line_grid[1])
    assert sel.attempt_select_operator(v(0, 1, "+")) is False


def test_operator_leading_back_into_path(line_config, line_grid):
    sel = SelectionState(line_config)
    sel.attempt_select_tile(line_grid[0])
    sel.attempt_select_operator(h(0, 0, "+"))
    sel.attempt_select_tile(line_grid[1])
    assert sel.attempt_select_operator(h(0, 0, "-")) is False


def test_operator_off_the_grid(line_config, line_grid):
    sel = SelectionState(line_config)
    sel.attempt_select_tile(line_grid[2])
    assert sel.attempt_select_operator(h(0, 2, "+")) is False


def test_operator_missing_from_level(line_grid):
    sel = SelectionState(DIFFICULTY_CONFIGS["easy"])
    sel.attempt_select_tile(line_grid[0])
    assert sel.attempt_select_operator(h(0, 0, "*")) is False
    assert sel.attempt_select_operator(h(0, 0, "+")) is True


def test_same_symbol_at_other_slot_is_a_different_instance(line_config, line_grid):
    sel = SelectionState(line_config)
    sel.attempt_select_tile(line_grid[0])
    sel.attempt_select_operator(h(0, 0, "+"))
    sel.attempt_select_tile(line_grid[1])
    # "+" at (0,1) is not the selected "+" at (0,0): no toggle, it extends the path
    assert sel.attempt_select_operator(h(0, 1, "+")) is True
    assert len(sel.selected_operator_instances) == 2


# ==============================================================================
# Truncation
# ==============================================================================

def _full(sel, grid):
    sel.attempt_select_tile(grid[0])
    sel.attempt_select_operator(h(0, 0, "+"))
    sel.attempt_select_tile(grid[1])
    sel.attempt_select_operator(h(0, 1, "*"))
    sel.attempt_select_tile(grid[2])


def test_reselecting_middle_tile_truncates_downstream(line_config, line_grid):
    sel = SelectionState(line_config)
    _full(sel, line_grid)
    assert sel.attempt_select_tile(line_grid[1]) is True
    assert [t.id for t in sel.selected_tiles] == [0]
    assert sel.selected_operator_instances == (h(0, 0, "+"),)
    # the pending operator still points at tile 1
    assert sel.attempt_select_tile(line_grid[1]) is True


def test_reselecting_last_tile_removes_only_it(line_config, line_grid):
    sel = SelectionState(line_config)
    _full(sel, line_grid)
    assert sel.attempt_select_tile(line_grid[2])
    assert [t.id for t in sel.selected_tiles] == [0, 1]
    assert len(sel.selected_operator_instances) == 2


def test_reselecting_first_operator_keeps_first_tile(line_config, line_grid):
    sel = SelectionState(line_config)
    _full(sel, line_grid)
    assert sel.attempt_select_operator(h(0, 0, "+"))
    assert [t.id for t in sel.selected_tiles] == [0]
    assert sel.selected_operator_instances == ()


def test_clear_selection(line_config, line_grid):
    sel = SelectionState(line_config)
    _full(sel, line_grid)
    sel.clear_selection()
    assert sel.is_empty
    assert sel.to_payload()["turn"] == "tile"


# ==============================================================================
# Drag tracker
# ==============================================================================

def test_swipe_builds_and_finishes(line_config, line_grid):
    sw = SwipeTracker(line_config)
    sw.begin(line_grid[0])
    assert sw.extend(line_grid[1])
    assert sw.note_operator(h(0, 0, "*"))
    assert sw.extend(line_grid[2])
    assert sw.result is None            # second gap has no operator yet
    assert sw.note_operator(h(0, 1, "-"))
    assert sw.result == 4 * 7 - 1
    assert sw.finish() == ([line_grid[0], line_grid[1], line_grid[2]], ["*", "-"])
    assert sw.active is False


def test_swipe_rejects_bends_and_overlong_paths(line_config, line_grid):
    sw = SwipeTracker(line_config)
    sw.begin(line_grid[0])
    assert sw.extend(line_grid[1])
    assert sw.extend(line_grid[4]) is False       # L shape
    assert sw.extend(line_grid[2])
    assert sw.extend(line_grid[5]) is False       # already three tiles
    assert [t.id for t in sw.path] == [0, 1, 2]


def test_swipe_revisit_truncates(line_config, line_grid):
    sw = SwipeTracker(line_config)
    sw.begin(line_grid[0])
    sw.extend(line_grid[1])
    sw.note_operator(h(0, 0, "+"))
    sw.extend(line_grid[2])
    assert sw.extend(line_grid[1])
    assert [t.id for t in sw.path] == [0, 1]
    assert sw.operators == ["+"]


def test_swipe_operator_must_sit_between_last_two_tiles(line_config, line_grid):
    sw = SwipeTracker(line_config)
    sw.begin(line_grid[0])
    assert sw.note_operator(h(0, 0, "+")) is False   # only one tile so far
    sw.extend(line_grid[1])
    assert sw.note_operator(h(0, 1, "+")) is False
    assert sw.note_operator(v(0, 0, "+")) is False
    assert sw.note_operator(h(0, 0, "+")) is True


def test_incomplete_swipe_finishes_with_none(line_config, line_grid):
    sw = SwipeTracker(line_config)
    sw.begin(line_grid[0])
    sw.extend(line_grid[1])
    assert sw.finish() is None
    assert sw.extend(line_grid[2]) is False    # inactive after finish
