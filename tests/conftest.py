from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the workinfo package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from workinfo.core import config as core_config  # noqa: E402
from workinfo.core.rate_limiter import reset_limits  # noqa: E402
from workinfo.db import models  # noqa: E402
from workinfo.db import session as db_session  # noqa: E402


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Temporary SQLite database plus static dir; resets the settings/engine caches."""
    db_file = tmp_path / "test.db"
    static_dir = tmp_path / "static"
    static_dir.mkdir()
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("STATIC_DIR", str(static_dir))
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://cards.example.com")
    monkeypatch.setenv("APP_ENV", "test")
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]
    reset_limits()

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield tmp_path

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]
    core_config.get_settings.cache_clear()
