# gridgenius/games/grid_genius/__init__.py
from flask import Blueprint

bp = Blueprint(
    "grid_genius",
    __name__,
    url_prefix="/games/grid_genius",
)

from . import routes  # noqa: E402,F401  (registers the views on bp)
