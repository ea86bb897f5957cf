# gridgenius/config.py
import os


def _int_env(name, default=None):
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return int(raw)


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Session settings
    SESSION_COOKIE_SECURE = False  # True in production with HTTPS
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Grid generation
    GRID_MAX_ATTEMPTS = _int_env('GRID_MAX_ATTEMPTS', 10)
    GRID_MAX_REBUILDS = _int_env('GRID_MAX_REBUILDS', 5)
    GRID_SEED = _int_env('GRID_SEED')          # fixed seed -> reproducible sessions
    GRID_MAX_SESSIONS = _int_env('GRID_MAX_SESSIONS', 1000)
    GRID_CLOCK = os.environ.get('GRID_CLOCK', 'server')   # 'server' or 'client' (/api/tick)

    # Rate limiting
    RATELIMIT_ENABLED = True
    RATELIMIT_DEFAULT = "200 per hour; 50 per minute"
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    GRID_START_LIMIT = "30 per minute"


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    SESSION_COOKIE_SECURE = True


class TestingConfig(Config):
    TESTING = True
    RATELIMIT_ENABLED = False
    GRID_CLOCK = 'client'
    GRID_SEED = 1234


CONFIGS = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
