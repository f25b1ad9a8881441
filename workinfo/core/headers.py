"""Security headers applied to every response."""
from __future__ import annotations

from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware


def _directive(name: str, sources: Iterable[str]) -> str:
    extra = []
    for source in sources:
        if source and source not in extra:
            extra.append(source)
    return " ".join([name, "'self'", *extra])


def build_csp(script_origins: Iterable[str] = (), connect_sources: Iterable[str] = ()) -> str:
    """CSP allowing our own scripts plus the given external origins.

    ``connect_sources`` widens only ``connect-src`` (analytics beacons);
    ``script-src`` stays limited to the origins scripts are loaded from.
    """
    script_origins = list(script_origins)
    return (
        "default-src 'self'; "
        "img-src 'self' data:; "
        "style-src 'self' 'unsafe-inline'; "
        f"{_directive('script-src', script_origins)}; "
        f"{_directive('connect-src', [*script_origins, *connect_sources])}"
    )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (CSP, anti clickjacking, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        # Routes that inject external scripts set their own CSP first.
        response.headers.setdefault("Content-Security-Policy", build_csp())
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response
