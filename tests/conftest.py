import random

import pytest

from gridgenius import create_app
from gridgenius.games.core.difficulty import DIFFICULTY_CONFIGS
from gridgenius.games.core.models import grid_from_rows


@pytest.fixture
def app():
    app = create_app("testing")
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def tiny_config():
    """2x2 board, two tiles, + and -, targets 3..7."""
    return DIFFICULTY_CONFIGS["easy"].with_overrides(grid_size=2, target_range=(3, 7))


@pytest.fixture
def tiny_grid():
    return grid_from_rows([[1, 2], [3, 4]])


@pytest.fixture
def line_config():
    """3x3 board with three-tile runs and all operators."""
    return DIFFICULTY_CONFIGS["medium"].with_overrides(grid_size=3)


@pytest.fixture
def line_grid():
    return grid_from_rows([[4, 7, 1], [2, 5, 8], [3, 6, 9]])
