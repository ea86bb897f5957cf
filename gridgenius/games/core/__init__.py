# gridgenius/games/core/__init__.py
from .calculator import calculate_path_result, is_valid_path
from .grid_generator import (
    GenerationExhaustedError,
    generate_valid_grid,
    get_all_combinations,
    generate_targets,
)
from .selection import SelectionState, SwipeTracker

__all__ = [
    "calculate_path_result", "is_valid_path",
    "GenerationExhaustedError", "generate_valid_grid", "get_all_combinations", "generate_targets",
    "SelectionState", "SwipeTracker",
]
