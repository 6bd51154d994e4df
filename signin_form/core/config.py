"""
Configuration helpers for the signin form.

The Mongo target may come from any of the variable names used by common
hosting providers; the first non-empty one wins.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

MONGO_URI_VARS = ("MONGO_URI", "MONGODB_URI", "DATABASE_URL", "MONGO_URL")
DEFAULT_DB_NAME = "projectSchool"
DEFAULT_SERVER_SELECTION_TIMEOUT_MS = 7000
DEFAULT_PORT = 3000


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    mongo_uri: str
    mongo_db_name: str
    mongo_server_selection_timeout_ms: int
    host: str
    port: int
    log_level: str


def _first_env(names: tuple[str, ...]) -> str:
    for name in names:
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return ""


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str | None, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        mongo_uri=_first_env(MONGO_URI_VARS),
        mongo_db_name=(os.getenv("MONGO_DB_NAME") or DEFAULT_DB_NAME).strip(),
        mongo_server_selection_timeout_ms=_int(
            os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS"), DEFAULT_SERVER_SELECTION_TIMEOUT_MS
        ),
        host=os.getenv("HOST") or "0.0.0.0",
        port=_int(os.getenv("PORT"), DEFAULT_PORT),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
