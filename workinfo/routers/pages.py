from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse

from workinfo.core import csrf
from workinfo.core.guards import require_guest, require_user
from workinfo.core.pwa import build_manifest
from workinfo.routers._shared import safe_next, templates
from workinfo.services.card_service import CardService, card_to_dict, share_url
from workinfo.services.session_service import SessionContext, current_session
from workinfo.services.theme_service import ThemeState, load_theme
from workinfo.services.tracking_script import validate_tracking_script

router = APIRouter(prefix="", tags=["pages"])
card_service = CardService()


def _render_form(request: Request, name: str, context: dict) -> HTMLResponse:
    token = csrf.issue_csrf_token(request)
    response = templates(request).TemplateResponse(request, name, {**context, "csrf_token": token})
    csrf.write_csrf_cookie(response, token)
    return response


@router.get("/")
def home(ctx: SessionContext = Depends(current_session)):
    return RedirectResponse("/dashboard" if ctx.is_authenticated else "/login", status_code=302)


@router.get("/login", response_class=HTMLResponse)
def login_page(
    request: Request,
    error: str = "",
    email: str = "",
    next: str = "",
    _guest: SessionContext = Depends(require_guest),
    theme: ThemeState = Depends(load_theme),
):
    context = {"error": error, "email": email, "next": safe_next(next), "theme": theme}
    return _render_form(request, "login.html", context)


@router.get("/register", response_class=HTMLResponse)
def register_page(
    request: Request,
    error: str = "",
    email: str = "",
    username: str = "",
    _guest: SessionContext = Depends(require_guest),
    theme: ThemeState = Depends(load_theme),
):
    context = {"error": error, "email": email, "username": username, "theme": theme}
    return _render_form(request, "register.html", context)


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(
    request: Request,
    ctx: SessionContext = Depends(require_user),
    theme: ThemeState = Depends(load_theme),
):
    card = card_service.get_user_card(ctx.user_id)
    card_data = card_to_dict(card) if card else None
    tracking = validate_tracking_script(card_data.get("tracking_script") if card_data else None)
    context = {
        "user": ctx.user,
        "card": card_data,
        "share_url": share_url(ctx.user.username),
        "tracking": tracking,
        "theme": theme,
    }
    return _render_form(request, "dashboard.html", context)


@router.get("/offline", response_class=HTMLResponse)
def offline(request: Request, theme: ThemeState = Depends(load_theme)):
    return templates(request).TemplateResponse(request, "offline.html", {"theme": theme})


@router.get("/manifest.webmanifest")
def manifest():
    return JSONResponse(build_manifest(), media_type="application/manifest+json")


# Silences Chrome devtools probes (avoids noisy 404s in logs)
@router.get("/.well-known/appspecific/com.chrome.devtools.json")
def chrome_devtools_wellknown():
    return PlainTextResponse("", status_code=204)
