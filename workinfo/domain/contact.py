"""Format checks for the contact fields of a card."""
from __future__ import annotations

import re
import urllib.parse as urlparse

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_PATTERN = re.compile(r"\+?[0-9\s\-()]{10,}")
HEX_COLOR_PATTERN = re.compile(r"#?([0-9a-fA-F]{6})")


def is_valid_email(value: str | None) -> bool:
    if not value:
        return False
    return bool(EMAIL_PATTERN.fullmatch(value))


def is_valid_phone(value: str | None) -> bool:
    if not value:
        return False
    return bool(PHONE_PATTERN.fullmatch(value))


def normalize_external_url(value: str | None) -> str:
    """Add ``https://`` when the user typed a bare host."""
    v = (value or "").strip()
    if not v:
        return ""
    if re.match(r"^https?://", v, re.IGNORECASE):
        return v
    return "https://" + v.lstrip("/")


def is_valid_url(value: str | None) -> bool:
    candidate = normalize_external_url(value)
    if not candidate or any(ch.isspace() for ch in candidate):
        return False
    try:
        parsed = urlparse.urlsplit(candidate)
    except ValueError:
        return False
    return bool(parsed.netloc) and bool(parsed.hostname)


def normalize_hex_color(value: str | None) -> str | None:
    """Return ``#rrggbb`` (lower-case) or None when the value is not a hex color."""
    v = value.strip() if isinstance(value, str) else ""
    match = HEX_COLOR_PATTERN.fullmatch(v)
    if not match:
        return None
    return "#" + match.group(1).lower()
