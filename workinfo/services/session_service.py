"""Session helpers (issue tokens, cookies, per-request session context)."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request, Response

from workinfo.core.config import get_settings
from workinfo.db.models import User
from workinfo.repositories.sql_repository import SQLRepository

SESSION_COOKIE_NAME = "session"

logger = logging.getLogger(__name__)
_repo = SQLRepository()


@dataclass(frozen=True)
class SessionContext:
    """Authenticated user (if any) for the current request."""

    user: Optional[User] = None
    token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None


ANONYMOUS = SessionContext()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return value.astimezone(timezone.utc) if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _ttl_seconds() -> int:
    return max(60, get_settings().session_ttl_seconds)


def issue_session(user_id: str) -> str:
    """Create a new session token and persist it."""
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=_ttl_seconds())
    return _repo.create_session(user_id, expires_at)


def refresh_session(token: str) -> bool:
    """Push the expiry forward once half of the TTL has been used."""
    entity = _repo.get_user_session(token)
    if not entity:
        return False
    now = datetime.now(timezone.utc)
    expires_at = _as_utc(entity.expires_at)
    if expires_at < now:
        return False
    ttl = _ttl_seconds()
    if (expires_at - now).total_seconds() < ttl / 2:
        _repo.extend_session(token, now + timedelta(seconds=ttl))
    return True


def resolve_session(token: str | None) -> SessionContext:
    if not token:
        return ANONYMOUS
    entity = _repo.get_user_session(token)
    if not entity:
        return ANONYMOUS
    if _as_utc(entity.expires_at) < datetime.now(timezone.utc):
        _repo.delete_user_session(token)
        return ANONYMOUS
    user = _repo.get_user(entity.user_id)
    if not user:
        logger.warning("Session %s points to a missing user", token[:8])
        _repo.delete_user_session(token)
        return ANONYMOUS
    return SessionContext(user=user, token=token)


def current_session(request: Request) -> SessionContext:
    """FastAPI dependency: session context built from the session cookie."""
    return resolve_session(request.cookies.get(SESSION_COOKIE_NAME))


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    secure_cookie = settings.app_env == "prod"
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        httponly=True,
        secure=secure_cookie,
        samesite="lax",
        max_age=settings.session_ttl_seconds,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")


def delete_session(token: str) -> None:
    """Remove a session token from the store."""
    if not token:
        return
    _repo.delete_user_session(token)
