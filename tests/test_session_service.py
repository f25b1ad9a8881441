from __future__ import annotations

from datetime import datetime, timedelta, timezone

from workinfo.repositories.sql_repository import SQLRepository
from workinfo.services.session_service import ANONYMOUS, issue_session, refresh_session, resolve_session


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None) if value.tzinfo else value


def test_resolve_unknown_or_missing_token_is_anonymous(db_env):
    assert resolve_session(None) is ANONYMOUS
    assert resolve_session("nope") is ANONYMOUS


def test_expired_session_is_removed(db_env):
    repo = SQLRepository()
    user = repo.create_user("a@example.com", "alpha", "hash")
    token = repo.create_session(user.id, datetime.now(timezone.utc) - timedelta(minutes=1))
    assert resolve_session(token) is ANONYMOUS
    assert repo.get_user_session(token) is None
    assert refresh_session(token) is False


def test_refresh_extends_only_after_half_the_ttl(db_env, monkeypatch):
    monkeypatch.setenv("SESSION_TTL_SECONDS", "3600")
    from workinfo.core.config import get_settings

    get_settings.cache_clear()
    repo = SQLRepository()
    user = repo.create_user("b@example.com", "bravo", "hash")

    fresh = issue_session(user.id)
    before = repo.get_user_session(fresh).expires_at
    assert refresh_session(fresh) is True
    assert repo.get_user_session(fresh).expires_at == before

    stale = repo.create_session(user.id, datetime.now(timezone.utc) + timedelta(minutes=10))
    assert refresh_session(stale) is True
    extended = _naive(repo.get_user_session(stale).expires_at)
    assert extended > _naive(datetime.now(timezone.utc) + timedelta(minutes=50))
