"""
Double-submit CSRF protection.

HTML forms post the token in a ``csrf_token`` field; the card API sends it in
the ``X-CSRF-Token`` header. Either way it must equal the ``csrf_token``
cookie, and a request carrying an Origin/Referer must come from this host.
"""
from __future__ import annotations

import logging
import secrets
from urllib import parse as urlparse

from fastapi import HTTPException, Request, Response

from workinfo.core.config import get_settings

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "x-csrf-token"
MIN_TOKEN_LENGTH = 16

logger = logging.getLogger(__name__)


def _cookie_token(request: Request) -> str | None:
    token = request.cookies.get(CSRF_COOKIE_NAME)
    if token and len(token) >= MIN_TOKEN_LENGTH:
        return token
    return None


def issue_csrf_token(request: Request) -> str:
    """The visitor's current token, or a fresh one when there is none."""
    return _cookie_token(request) or secrets.token_urlsafe(32)


def write_csrf_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        CSRF_COOKIE_NAME,
        token,
        max_age=settings.session_ttl_seconds,
        httponly=False,
        secure=settings.app_env == "prod",
        samesite="strict",
        path="/",
    )


def _is_same_origin(request: Request) -> bool:
    source = request.headers.get("origin") or request.headers.get("referer") or ""
    if not source:
        return True
    try:
        parsed = urlparse.urlsplit(source)
        source_host = (parsed.hostname or "").lower()
    except ValueError:
        return False
    if source_host and source_host != (request.url.hostname or "").lower():
        return False
    return not parsed.scheme or parsed.scheme == request.url.scheme


def validate_csrf(request: Request, supplied_token: str | None = None) -> None:
    """Raise 403 unless the form/header token matches the cookie."""
    cookie_token = _cookie_token(request)
    token = (supplied_token or "").strip() or (request.headers.get(CSRF_HEADER_NAME) or "").strip()
    if not cookie_token or not token:
        logger.warning("CSRF token missing on %s %s", request.method, request.url.path)
        raise HTTPException(403, "Missing CSRF token.")
    if not secrets.compare_digest(cookie_token, token):
        logger.warning("CSRF token mismatch on %s %s", request.method, request.url.path)
        raise HTTPException(403, "Invalid CSRF token.")
    if not _is_same_origin(request):
        logger.warning("Cross-origin %s %s rejected", request.method, request.url.path)
        raise HTTPException(403, "Invalid origin.")


def require_csrf_header(request: Request) -> None:
    """FastAPI dependency for JSON endpoints that carry the token in a header."""
    validate_csrf(request)
