"""
Tokenizer helpers for user-pasted ``<script>`` snippets.

The snippet is fed through BeautifulSoup's ``html.parser`` builder so tag
names and attributes come from a real tokenizer: attribute order, quoting
style and whitespace do not matter, and ``data-async`` is never confused
with ``async``. The element must be closed (``/>`` or its own end tag)
and duplicated attributes keep their first value.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union

from bs4 import BeautifulSoup

AttributeValue = Union[str, bool]

BOOLEAN_ATTRIBUTES = frozenset({"defer", "async"})
_SELF_CLOSING = re.compile(r"<script\b[^>]*/>", re.IGNORECASE)
_END_TAG = re.compile(r"</script\s*>", re.IGNORECASE)

# Only these attributes survive extraction; everything else is dropped.
SAFE_ATTRIBUTES: tuple[str, ...] = (
    "defer",
    "async",
    "type",
    "crossorigin",
    "integrity",
    "data-website-id",
    "data-domain",
    "data-api",
    "data-exclude",
    "data-include",
    "data-host-url",
    "data-track-localhost",
)


@dataclass(frozen=True)
class ScriptTag:
    """Attribute list of the single script element found in a snippet."""

    attributes: tuple[tuple[str, str], ...]

    def get(self, name: str) -> Optional[str]:
        for key, value in self.attributes:
            if key == name:
                return value
        return None

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    @property
    def source(self) -> Optional[str]:
        src = (self.get("src") or "").strip()
        return src or None


def _as_text(value) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(str(item) for item in value)
    return "" if value is None else str(value)


def _start_offset(raw: str, element) -> Optional[int]:
    line, column = element.sourceline, element.sourcepos
    if line is None or column is None:
        return None
    lines = raw.split("\n")
    return sum(len(text) + 1 for text in lines[: line - 1]) + column


def _is_closed(raw: str, element) -> bool:
    """True when the element is self-closing or has its own end tag."""
    start = _start_offset(raw, element)
    if start is None or raw[start : start + 7].lower() != "<script":
        return False
    if _SELF_CLOSING.match(raw, start):
        return True
    return _END_TAG.search(raw, start) is not None


def extract_script_tag(raw: str | None) -> Optional[ScriptTag]:
    """Return the only script element in ``raw``; None for zero, several or unclosed."""
    if not raw or "<" not in raw:
        return None
    # "ignore" keeps the first of duplicated attributes.
    soup = BeautifulSoup(raw, "html.parser", on_duplicate_attribute="ignore")
    found = soup.find_all("script")
    if len(found) != 1:
        return None
    element = found[0]
    if not _is_closed(raw, element):
        return None
    return ScriptTag(attributes=tuple((name.lower(), _as_text(value)) for name, value in element.attrs.items()))


def extract_safe_attributes(tag: ScriptTag) -> dict[str, AttributeValue]:
    """Keep the allow-listed attributes; bare ``defer``/``async`` become True."""
    attributes: dict[str, AttributeValue] = {}
    for name in SAFE_ATTRIBUTES:
        value = tag.get(name)
        if value is None:
            continue
        if value.strip():
            attributes[name] = value
        elif name in BOOLEAN_ATTRIBUTES:
            attributes[name] = True
    return attributes
