"""
Environment-backed settings.

Values are read lazily so tests can monkeypatch the environment.
Blank or unparsable values fall back to the default.
"""

from __future__ import annotations

import os

DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_CORS_ORIGINS = ("http://localhost:5173", "http://127.0.0.1:5173")


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def github_api_url() -> str:
    return env_str("GITHUB_API_URL", DEFAULT_GITHUB_API_URL).rstrip("/")


def github_token() -> str:
    return env_str("GITHUB_TOKEN")


def github_timeout_s() -> float:
    return env_float("GITHUB_TIMEOUT_S", 30.0)


def db_pool_min_size() -> int:
    return max(env_int("DB_POOL_MIN_SIZE", 1), 1)


def db_pool_max_size() -> int:
    return max(env_int("DB_POOL_MAX_SIZE", 5), db_pool_min_size())


def cors_origins() -> list[str]:
    raw = env_str("CORS_ORIGINS")
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO").upper()
