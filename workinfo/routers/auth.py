from __future__ import annotations

import logging
from urllib.parse import quote_plus

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from workinfo.core import csrf
from workinfo.core.rate_limiter import rate_limit_ip
from workinfo.routers._shared import safe_next
from workinfo.services.auth_service import AuthService, InvalidCredentialsError, RegistrationError
from workinfo.services.session_service import (
    SessionContext,
    clear_session_cookie,
    current_session,
    set_session_cookie,
)

router = APIRouter(prefix="/auth", tags=["auth"])
auth_service = AuthService()
logger = logging.getLogger(__name__)


def _redirect_with_error(path: str, err: str, **params: str) -> RedirectResponse:
    query = f"error={quote_plus(err)}"
    for key, value in params.items():
        if value:
            query += f"&{key}={quote_plus(value)}"
    return RedirectResponse(f"{path}?{query}", status_code=303)


@router.post("/login")
def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    next_path: str = Form("", alias="next"),
    csrf_token: str = Form(""),
):
    rate_limit_ip(request, "auth:login", limit=10, window_seconds=300)
    csrf.validate_csrf(request, csrf_token)
    try:
        result = auth_service.login(email, password)
    except InvalidCredentialsError as exc:
        return _redirect_with_error("/login", exc.message, email=email)
    response = RedirectResponse(safe_next(next_path), status_code=303)
    set_session_cookie(response, result.session_token)
    return response


@router.post("/register")
def register(
    request: Request,
    email: str = Form(""),
    username: str = Form(""),
    password: str = Form(""),
    password_confirm: str = Form(""),
    csrf_token: str = Form(""),
):
    rate_limit_ip(request, "auth:register", limit=5, window_seconds=300)
    csrf.validate_csrf(request, csrf_token)
    try:
        result = auth_service.register(email, password, password_confirm, username)
    except RegistrationError as exc:
        return _redirect_with_error("/register", exc.message, email=email, username=username)
    response = RedirectResponse("/dashboard", status_code=303)
    set_session_cookie(response, result.session_token)
    return response


@router.post("/logout")
def logout(request: Request, csrf_token: str = Form(""), ctx: SessionContext = Depends(current_session)):
    csrf.validate_csrf(request, csrf_token)
    auth_service.logout(ctx.token)
    response = RedirectResponse("/login", status_code=303)
    clear_session_cookie(response)
    return response


@router.get("/username-available")
def username_available(request: Request, username: str = ""):
    rate_limit_ip(request, "auth:username", limit=60, window_seconds=60)
    valid = auth_service.validate_username(username)
    available = valid and auth_service.check_username_availability(username)
    return {"username": username.strip().lower(), "valid": valid, "available": available}
