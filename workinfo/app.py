"""Application factory for the WorkInfo API."""
from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from workinfo.core.config import get_settings
from workinfo.core.guards import GuestOnly, LoginRequired, guest_only_handler, login_required_handler
from workinfo.core.headers import SecurityHeadersMiddleware
from workinfo.core.logging import configure_logging
from workinfo.routers import auth as auth_router
from workinfo.routers import cards as cards_router
from workinfo.routers import pages as pages_router
from workinfo.routers import public as public_router
from workinfo.routers import theme as theme_router

BASE = os.path.dirname(__file__)
TEMPLATES_DIR = os.path.join(BASE, "templates")

logger = logging.getLogger(__name__)


class CachedStaticFiles(StaticFiles):
    def set_headers(self, scope, resp, path, stat_result):
        # Uploaded files carry a content hash in their names
        resp.headers["Cache-Control"] = "public, max-age=31536000, immutable"


def create_app() -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (``--factory``)."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="WorkInfo Card API")
    os.makedirs(settings.uploads_dir, exist_ok=True)
    app.mount("/static", CachedStaticFiles(directory=settings.static_dir), name="static")
    app.state.templates = Jinja2Templates(directory=TEMPLATES_DIR)

    allowed_cors = {settings.public_base_url}
    if settings.app_env != "prod":
        allowed_cors.update(
            {
                "http://localhost:8000",
                "http://127.0.0.1:8000",
                "http://localhost:3000",
                "http://127.0.0.1:3000",
            }
        )
    allowed_cors = {origin for origin in allowed_cors if origin}
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    app.add_exception_handler(LoginRequired, login_required_handler)
    app.add_exception_handler(GuestOnly, guest_only_handler)

    @app.get("/favicon.ico", include_in_schema=False)
    def favicon():
        ico_path = os.path.join(settings.static_dir, "favicon.ico")
        if os.path.exists(ico_path):
            return FileResponse(ico_path, media_type="image/x-icon")
        return Response(status_code=204)

    app.include_router(auth_router.router)
    app.include_router(pages_router.router)
    app.include_router(cards_router.router)
    app.include_router(theme_router.router)
    app.include_router(public_router.router)

    logger.info("WorkInfo API ready (env=%s, base=%s)", settings.app_env, settings.public_base_url)
    return app
