"""Route guards expressed as FastAPI dependencies."""
from __future__ import annotations

from urllib.parse import quote

from fastapi import Depends, Request
from fastapi.responses import RedirectResponse

from workinfo.services.session_service import SessionContext, current_session, refresh_session

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"


class LoginRequired(Exception):
    """Raised when a protected route is hit without a valid session."""

    def __init__(self, next_path: str = ""):
        super().__init__(next_path)
        self.next_path = next_path


class GuestOnly(Exception):
    """Raised when a signed-in user opens a guest page (login/register)."""


def require_user(request: Request, ctx: SessionContext = Depends(current_session)) -> SessionContext:
    if not ctx.is_authenticated:
        raise LoginRequired(request.url.path)
    refresh_session(ctx.token)
    return ctx


def require_guest(ctx: SessionContext = Depends(current_session)) -> SessionContext:
    if ctx.is_authenticated:
        raise GuestOnly()
    return ctx


def login_required_handler(request: Request, exc: LoginRequired) -> RedirectResponse:
    dest = LOGIN_PATH
    if exc.next_path and exc.next_path != LOGIN_PATH:
        dest = f"{LOGIN_PATH}?next={quote(exc.next_path, safe='/')}"
    return RedirectResponse(dest, status_code=303)


def guest_only_handler(request: Request, exc: GuestOnly) -> RedirectResponse:
    return RedirectResponse(DASHBOARD_PATH, status_code=303)
