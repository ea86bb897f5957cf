# gridgenius/games/core/difficulty.py
from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple

# ============================================================
# Value / operator constants
# ============================================================

MIN_NUMBER = 1
MAX_NUMBER = 9

ADDITION = "+"
SUBTRACTION = "-"
MULTIPLICATION = "*"
ALL_OPERATORS: Tuple[str, ...] = (ADDITION, SUBTRACTION, MULTIPLICATION)

HORIZONTAL = "horizontal"
VERTICAL = "vertical"

# ============================================================
# Timing / scoring
# ============================================================

SUCCESS_DELAY_MS = 1500       # UI waits this long before next_round()
FEEDBACK_DELAY_MS = 2000      # selection display before reset
TICK_MS = 100
TIME_ATTACK_MS = 60_000
TIME_ATTACK_ROUNDS = 999

BASE_SCORE = 10
DIFFICULTY_MULTIPLIERS = {"easy": 1, "medium": 1.5, "hard": 2}
MODE_MULTIPLIERS = {"classic": 1, "time_attack": 2}

CLASSIC = "classic"
TIME_ATTACK = "time_attack"
GAME_MODES = (CLASSIC, TIME_ATTACK)


@dataclass(frozen=True)
class TargetRange:
    min: int
    max: int

    def __contains__(self, value: int) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True)
class DifficultyConfig:
    """
    Static per-level settings. One instance per level; never mutated.
    Use with_overrides() to derive a variant (tests, CLI experiments).
    """
    name: str
    grid_size: int
    tiles_count: int
    operators_count: int
    available_operators: Tuple[str, ...]
    target_range: TargetRange
    total_rounds: int = 5
    meta: Dict[str, str] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if self.grid_size not in (2, 3, 4, 5):
            raise ValueError(f"grid_size must be between 2 and 5 (got {self.grid_size})")
        if self.tiles_count < 2 or self.tiles_count > self.grid_size:
            raise ValueError(f"tiles_count {self.tiles_count} does not fit a {self.grid_size}x{self.grid_size} grid")
        if self.operators_count != self.tiles_count - 1:
            raise ValueError("operators_count must equal tiles_count - 1")
        if not self.available_operators:
            raise ValueError("available_operators must not be empty")
        unknown = [op for op in self.available_operators if op not in ALL_OPERATORS]
        if unknown:
            raise ValueError(f"unknown operators: {unknown}")
        if self.target_range.min > self.target_range.max:
            raise ValueError("target_range.min must be <= target_range.max")
        if self.total_rounds < 1:
            raise ValueError("total_rounds must be >= 1")

    def with_overrides(self, **changes) -> "DifficultyConfig":
        if "target_range" in changes and isinstance(changes["target_range"], (tuple, list)):
            lo, hi = changes["target_range"]
            changes["target_range"] = TargetRange(int(lo), int(hi))
        if "available_operators" in changes:
            changes["available_operators"] = tuple(changes["available_operators"])
        return replace(self, **changes)

    def to_payload(self) -> Dict[str, object]:
        return {
            "level": self.name,
            "grid_size": self.grid_size,
            "tiles_count": self.tiles_count,
            "operators_count": self.operators_count,
            "available_operators": list(self.available_operators),
            "target_range": {"min": self.target_range.min, "max": self.target_range.max},
            "total_rounds": self.total_rounds,
        }


DIFFICULTY_CONFIGS: Dict[str, DifficultyConfig] = {
    "easy": DifficultyConfig(
        name="easy",
        grid_size=3,
        tiles_count=2,
        operators_count=1,
        available_operators=(ADDITION, SUBTRACTION),
        target_range=TargetRange(1, 20),
        total_rounds=5,
    ),
    "medium": DifficultyConfig(
        name="medium",
        grid_size=4,
        tiles_count=3,
        operators_count=2,
        available_operators=ALL_OPERATORS,
        target_range=TargetRange(1, 35),
        total_rounds=5,
    ),
    "hard": DifficultyConfig(
        name="hard",
        grid_size=4,
        tiles_count=3,
        operators_count=2,
        available_operators=ALL_OPERATORS,
        target_range=TargetRange(1, 50),
        total_rounds=5,
    ),
}


def normalize_level(level: Optional[str]) -> str:
    """Normalize UI level -> canonical level key; unknown values fall back to 'medium'."""
    if level is None:
        return "medium"
    ALIASES = {"0": "easy", "1": "medium", "2": "hard"}
    s = str(level).strip().lower()
    s = ALIASES.get(s, s)
    return s if s in DIFFICULTY_CONFIGS else "medium"


def normalize_mode(mode: Optional[str]) -> str:
    s = (mode or "").strip().lower().replace("-", "_")
    if s in ("timeattack", "time_attack"):
        return TIME_ATTACK
    return CLASSIC


def get_config(difficulty) -> DifficultyConfig:
    """Accept a level name or an already-built config."""
    if isinstance(difficulty, DifficultyConfig):
        return difficulty
    return DIFFICULTY_CONFIGS[normalize_level(difficulty)]


__all__ = [
    "MIN_NUMBER", "MAX_NUMBER", "ALL_OPERATORS", "ADDITION", "SUBTRACTION", "MULTIPLICATION",
    "HORIZONTAL", "VERTICAL",
    "SUCCESS_DELAY_MS", "FEEDBACK_DELAY_MS", "TICK_MS", "TIME_ATTACK_MS", "TIME_ATTACK_ROUNDS",
    "BASE_SCORE", "DIFFICULTY_MULTIPLIERS", "MODE_MULTIPLIERS",
    "CLASSIC", "TIME_ATTACK", "GAME_MODES",
    "TargetRange", "DifficultyConfig", "DIFFICULTY_CONFIGS",
    "normalize_level", "normalize_mode", "get_config",
]
