"""Collects the external resources a rendered page loads from its <head>."""
from __future__ import annotations

import html
import re
import urllib.parse as urlparse
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Union

_ATTRIBUTE_NAME = re.compile(r"[a-z][a-z0-9-]*")


@dataclass(frozen=True)
class ScriptResource:
    """Declarative external script: load URL plus tag attributes."""

    url: str
    attributes: Mapping[str, Union[str, bool]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @property
    def origin(self) -> str:
        parsed = urlparse.urlsplit(self.url)
        return f"{parsed.scheme}://{parsed.netloc}"

    def render(self) -> str:
        parts = [f'<script src="{html.escape(self.url, quote=True)}"']
        for name, value in self.attributes.items():
            if not _ATTRIBUTE_NAME.fullmatch(name) or name == "src":
                continue
            if value is True:
                parts.append(f" {name}")
            elif value is False or value is None:
                continue
            else:
                parts.append(f' {name}="{html.escape(str(value), quote=True)}"')
        parts.append("></script>")
        return "".join(parts)


class PageHead:
    """Per-render registry of head scripts; build a new one for every page."""

    def __init__(self) -> None:
        self._scripts: list[ScriptResource] = []

    def add_script(self, resource: ScriptResource) -> None:
        self._scripts.append(resource)

    @property
    def scripts(self) -> tuple[ScriptResource, ...]:
        return tuple(self._scripts)

    def script_origins(self) -> list[str]:
        origins: list[str] = []
        for resource in self._scripts:
            if resource.origin not in origins:
                origins.append(resource.origin)
        return origins

    def render_scripts(self) -> str:
        return "\n".join(resource.render() for resource in self._scripts)
