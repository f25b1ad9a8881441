"""Domain helpers for username validation."""
from __future__ import annotations

import re

USERNAME_PATTERN = re.compile(r"[a-zA-Z0-9_]{3,20}")


def is_valid_username(value: str | None) -> bool:
    """Return True when username has 3-20 letters, digits or underscores."""
    if not value:
        return False
    return bool(USERNAME_PATTERN.fullmatch(value))


def normalize_username(value: str | None) -> str:
    # Usernames are stored lower-case so public lookups can ignore case.
    return (value or "").strip().lower()
