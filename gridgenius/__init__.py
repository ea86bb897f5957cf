# gridgenius/__init__.py
from __future__ import annotations
import os
import logging
import random
from typing import Any, Dict, Optional

import click
from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# --- extensions ---
# dev-friendly in-memory limiter; point RATELIMIT_STORAGE_URI at redis in prod
limiter = Limiter(get_remote_address)


def create_app(config_name: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)

    # ---------------------------
    # Config
    # ---------------------------
    from .config import CONFIGS
    name = (config_name or os.environ.get("GRIDGENIUS_CONFIG") or "development").strip().lower()
    app.config.from_object(CONFIGS.get(name, CONFIGS["development"]))
    app.config.from_pyfile("config.py", silent=True)  # instance/config.py (optional)
    if overrides:
        app.config.update(overrides)

    # ---------------------------
    # Logging
    # ---------------------------
    level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    app.logger.setLevel(level)
    for logger_name in ("gridgenius", "gridgenius.games", "gridgenius.games.core",
                        "gridgenius.games.grid_genius"):
        logging.getLogger(logger_name).setLevel(level)

    # ---------------------------
    # Extensions init
    # ---------------------------
    limiter.init_app(app)

    # ---------------------------
    # Blueprints
    # ---------------------------
    from .home.routes import bp as home_bp
    app.register_blueprint(home_bp)

    from .games.grid_genius import bp as grid_genius_bp
    # url_prefix is set on the blueprint
    app.register_blueprint(grid_genius_bp)

    # ---------------------------
    # CLI commands
    # ---------------------------
    @app.cli.command("grid-sample")
    @click.option("--difficulty", default="medium", show_default=True)
    @click.option("--seed", type=int, default=None)
    def grid_sample(difficulty, seed):
        """Generate one grid and print it with its targets."""
        from .games.core.difficulty import get_config
        from .games.core.grid_generator import generate_valid_grid, get_all_combinations, generate_targets
        from .games.core.models import grid_rows

        cfg = get_config(difficulty)
        rng = random.Random(seed)
        grid = generate_valid_grid(cfg, max_attempts=app.config["GRID_MAX_ATTEMPTS"], rng=rng)
        combos = get_all_combinations(grid, cfg)
        for row in grid_rows(grid):
            click.echo(" ".join(str(v) for v in row))
        click.echo(f"combinations={len(combos)} targets={generate_targets(combos, cfg, rng=rng)}")

    @app.cli.command("grid-stats")
    @click.option("--difficulty", default="medium", show_default=True)
    @click.option("--samples", type=int, default=200, show_default=True)
    @click.option("--seed", type=int, default=None)
    def grid_stats(difficulty, samples, seed):
        """How often a raw grid passes the solution gate, and mean combination count."""
        from .games.core.difficulty import get_config
        from .games.core.grid_generator import generate_grid, get_all_combinations

        cfg = get_config(difficulty)
        rng = random.Random(seed)
        passed, total = 0, 0
        for _ in range(max(1, samples)):
            n = len(get_all_combinations(generate_grid(cfg, rng=rng), cfg))
            total += n
            if n >= cfg.total_rounds:
                passed += 1
        click.echo(f"{cfg.name}: pass_rate={passed / max(1, samples):.1%} "
                   f"mean_combinations={total / max(1, samples):.1f}")

    @app.after_request
    def set_security_headers(resp):
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return resp

    app.logger.info("Grid Genius app created (%s)", name)
    return app
