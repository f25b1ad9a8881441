"""Small helpers shared by the routers."""
from __future__ import annotations

from fastapi import Request
from fastapi.templating import Jinja2Templates


def templates(request: Request) -> Jinja2Templates:
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates not configured")


def safe_next(value: str | None, default: str = "/dashboard") -> str:
    """Only same-site absolute paths are accepted as redirect targets."""
    target = (value or "").strip()
    if not target.startswith("/") or target.startswith("//") or "\\" in target:
        return default
    return target
