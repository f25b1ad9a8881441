"""
Configuration helpers for the WorkInfo backend.

Routers and services read settings through ``get_settings()`` instead of
touching ``os.environ`` directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    public_base_url: str
    database_url: str
    session_ttl_seconds: int
    static_dir: str
    max_upload_bytes: int
    log_level: str

    @property
    def uploads_dir(self) -> str:
        return os.path.join(self.static_dir, "uploads")


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    default_db = f"sqlite:///{PROJECT_ROOT / 'workinfo.db'}"
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "https://workinfo.me").rstrip("/"),
        database_url=os.getenv("DATABASE_URL", default_db),
        session_ttl_seconds=_int(os.getenv("SESSION_TTL_SECONDS", "604800"), 604800),
        static_dir=os.getenv("STATIC_DIR", str(PROJECT_ROOT / "web")),
        max_upload_bytes=_int(os.getenv("MAX_UPLOAD_BYTES", str(2 * 1024 * 1024)), 2 * 1024 * 1024),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
