# gridgenius/home/routes.py
from flask import Blueprint, jsonify, url_for

from gridgenius.games.core.difficulty import DIFFICULTY_CONFIGS, GAME_MODES

bp = Blueprint("home", __name__)

@bp.get("/")
def index():
    games = [{"key": "grid_genius", "name": "Grid Genius",
              "start": url_for("grid_genius.api_start")}]

    # quick links: one per difficulty/mode pair (clients POST these to /api/start)
    quick_links = [
        {"label": f"{level.title()} - {mode.replace('_', ' ')}",
         "difficulty": level, "mode": mode}
        for level in DIFFICULTY_CONFIGS
        for mode in GAME_MODES
    ]
    return jsonify({"ok": True, "games": games, "quick_links": quick_links})
