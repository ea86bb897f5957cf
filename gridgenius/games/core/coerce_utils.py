# gridgenius/games/core/coerce_utils.py
from typing import Any, List, Optional

from .difficulty import HORIZONTAL, VERTICAL, ALL_OPERATORS
from .models import OperatorInstance

_ORIENTATION_ALIASES = {"h": HORIZONTAL, "horizontal": HORIZONTAL,
                        "v": VERTICAL, "vertical": VERTICAL}
_OPERATOR_ALIASES = {"×": "*", "x": "*", "X": "*", "−": "-", "–": "-"}


def coerce_int(val: Any) -> Optional[int]:
    if isinstance(val, bool):
        return None
    try:
        return int(val)
    except (TypeError, ValueError):
        return None


def coerce_int_list(val) -> List[int]:
    """Coerce various input types to list of integers; [] if anything is off."""
    if val is None:
        return []
    if isinstance(val, str):
        val = [p.strip() for p in val.replace("[", "").replace("]", "").split(",") if p.strip()]
    if not isinstance(val, (list, tuple)):
        return []
    out = [coerce_int(x) for x in val]
    return [] if any(x is None for x in out) else out


def coerce_operator_instance(data: Any) -> Optional[OperatorInstance]:
    """{"row", "col", "orientation", "operator"} -> OperatorInstance, or None."""
    if not isinstance(data, dict):
        return None
    row = coerce_int(data.get("row"))
    col = coerce_int(data.get("col"))
    orientation = _ORIENTATION_ALIASES.get(str(data.get("orientation") or data.get("position") or "").strip().lower())
    op = str(data.get("operator") or "").strip()
    op = _OPERATOR_ALIASES.get(op, op)
    if row is None or col is None or orientation is None or op not in ALL_OPERATORS:
        return None
    if row < 0 or col < 0:
        return None
    return OperatorInstance(row=row, col=col, orientation=orientation, operator=op)


def coerce_operator_list(val) -> Optional[List[OperatorInstance]]:
    if val is None:
        return []
    if not isinstance(val, list):
        return None
    out = [coerce_operator_instance(x) for x in val]
    return None if any(x is None for x in out) else out
