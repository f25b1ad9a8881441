"""
Light/dark mode and brand colors.

A ``ThemeState`` is built per request from the theme cookies (and the
``Sec-CH-Prefers-Color-Scheme`` client hint for ``auto``), mutated by the
theme routes and written back with ``save_theme``.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from fastapi import Request, Response

from workinfo.domain.contact import normalize_hex_color

logger = logging.getLogger(__name__)

THEME_COOKIE = "workinfo-theme"
COLORS_COOKIE = "workinfo-colors"
PREFERS_COLOR_SCHEME_HEADER = "sec-ch-prefers-color-scheme"

THEME_MODES = ("light", "dark", "auto")
THEME_LABELS = {"light": "Light", "dark": "Dark", "auto": "Auto"}
DEFAULT_PRIMARY_LIGHT = "#2563eb"
DEFAULT_PRIMARY_DARK = "#60a5fa"
META_THEME_COLOR_DARK = "#0f172a"
META_THEME_COLOR_LIGHT = "#ffffff"
_NEXT_MODE = {"light": "dark", "dark": "auto", "auto": "light"}


def _default_colors() -> dict[str, str]:
    return {"primaryLight": DEFAULT_PRIMARY_LIGHT, "primaryDark": DEFAULT_PRIMARY_DARK}


@dataclass
class ThemeState:
    mode: str = "auto"
    system_prefers_dark: bool = False
    colors: dict[str, str] = field(default_factory=_default_colors)

    @property
    def is_dark(self) -> bool:
        return self.mode == "dark" or (self.mode == "auto" and self.system_prefers_dark)

    @property
    def current_primary_color(self) -> str:
        return self.colors["primaryDark"] if self.is_dark else self.colors["primaryLight"]

    @property
    def label(self) -> str:
        return THEME_LABELS.get(self.mode, "Auto")

    @property
    def theme_color(self) -> str:
        return META_THEME_COLOR_DARK if self.is_dark else META_THEME_COLOR_LIGHT

    def set_theme(self, mode: str | None) -> bool:
        if mode not in THEME_MODES:
            return False
        self.mode = mode
        return True

    def toggle(self) -> str:
        self.mode = _NEXT_MODE.get(self.mode, "light")
        return self.mode

    def set_custom_colors(self, colors: Mapping[str, Any] | None) -> None:
        colors = colors or {}
        self.colors = {
            "primaryLight": normalize_hex_color(colors.get("primaryLight")) or self.colors["primaryLight"],
            "primaryDark": normalize_hex_color(colors.get("primaryDark")) or self.colors["primaryDark"],
        }

    def reset_colors(self) -> None:
        self.colors = _default_colors()

    def css_variables(self) -> dict[str, str]:
        return {
            "--color-primary": self.current_primary_color,
            "--color-primary-light": self.colors["primaryLight"],
            "--color-primary-dark": self.colors["primaryDark"],
        }

    def css_style(self) -> str:
        return "; ".join(f"{name}: {value}" for name, value in self.css_variables().items())

    def load_colors_from_card(self, card: Mapping[str, Any] | None) -> bool:
        if not card:
            return False
        light = card.get("theme_primary_light")
        dark = card.get("theme_primary_dark")
        if not (light or dark):
            return False
        self.set_custom_colors({"primaryLight": light, "primaryDark": dark})
        return True

    def colors_for_card(self) -> dict[str, str]:
        return {
            "theme_primary_light": self.colors["primaryLight"],
            "theme_primary_dark": self.colors["primaryDark"],
        }

    def as_dict(self) -> dict:
        return {
            "mode": self.mode,
            "label": self.label,
            "is_dark": self.is_dark,
            "colors": dict(self.colors),
            "current_primary_color": self.current_primary_color,
            "theme_color": self.theme_color,
            "css_variables": self.css_variables(),
        }


def load_theme(request: Request) -> ThemeState:
    """FastAPI dependency: theme state from cookies and client hints."""
    state = ThemeState()
    hint = (request.headers.get(PREFERS_COLOR_SCHEME_HEADER) or "").strip().strip('"').lower()
    state.system_prefers_dark = hint == "dark"
    state.set_theme(request.cookies.get(THEME_COOKIE))
    raw_colors = request.cookies.get(COLORS_COOKIE)
    if raw_colors:
        try:
            parsed = json.loads(raw_colors)
        except ValueError:
            logger.warning("Failed to parse saved colors cookie")
            parsed = None
        if isinstance(parsed, dict):
            state.set_custom_colors(parsed)
    return state


def save_theme(response: Response, state: ThemeState) -> None:
    max_age = 365 * 24 * 60 * 60
    response.set_cookie(THEME_COOKIE, state.mode, max_age=max_age, samesite="lax", path="/")
    response.set_cookie(COLORS_COOKIE, json.dumps(state.colors), max_age=max_age, samesite="lax", path="/")
    response.headers["Accept-CH"] = "Sec-CH-Prefers-Color-Scheme"
