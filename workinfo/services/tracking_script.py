"""
Validation and safe injection of user analytics scripts.

Users paste a ``<script>`` tag from their analytics provider into the card
settings. The raw text is stored as-is and re-parsed on every read; only a
``ParsedScript`` built from allow-listed pieces ever reaches a page.

Failures are expected input, not errors: ``parse_tracking_script`` returns
None and ``validate_tracking_script`` reports a single generic message, so
callers never learn which rule rejected the snippet.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from workinfo.domain.analytics_providers import detect_provider, is_allowed_analytics_url
from workinfo.domain.script_tags import AttributeValue, extract_safe_attributes, extract_script_tag
from workinfo.services.page_head import PageHead, ScriptResource

logger = logging.getLogger(__name__)

INVALID_SCRIPT_MESSAGE = "Invalid script format or unsupported provider"

DEFAULT_ASYNC = True
DEFAULT_DEFER = False


@dataclass(frozen=True)
class ParsedScript:
    source: str
    attributes: Mapping[str, AttributeValue] = field(default_factory=dict)
    provider: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))


@dataclass(frozen=True)
class TrackingScriptValidation:
    valid: bool
    error: Optional[str] = None
    provider: Optional[str] = None

    def as_dict(self) -> dict:
        return {"valid": self.valid, "error": self.error, "provider": self.provider}


def _parse(raw: str) -> Optional[ParsedScript]:
    tag = extract_script_tag(raw)
    if tag is None:
        return None
    source = tag.source
    if not source:
        return None
    if not is_allowed_analytics_url(source):
        return None
    return ParsedScript(
        source=source,
        attributes=extract_safe_attributes(tag),
        provider=detect_provider(source),
    )


def parse_tracking_script(raw: str | None) -> Optional[ParsedScript]:
    """Parse a pasted snippet into a ParsedScript, or None when it is not acceptable."""
    if not raw or not raw.strip():
        return None
    try:
        return _parse(raw)
    except Exception:
        logger.exception("Unexpected failure while parsing tracking script")
        return None


def validate_tracking_script(raw: str | None) -> TrackingScriptValidation:
    """An empty value is valid (no tracking); anything else must parse."""
    if not raw or not raw.strip():
        return TrackingScriptValidation(valid=True)
    parsed = parse_tracking_script(raw)
    if parsed is None:
        return TrackingScriptValidation(valid=False, error=INVALID_SCRIPT_MESSAGE)
    return TrackingScriptValidation(valid=True, provider=parsed.provider)


def build_script_resource(parsed: ParsedScript) -> ScriptResource:
    attributes = dict(parsed.attributes)
    attributes.setdefault("async", DEFAULT_ASYNC)
    attributes.setdefault("defer", DEFAULT_DEFER)
    return ScriptResource(url=parsed.source, attributes=attributes)


def inject_tracking_script(raw: str | None, head: PageHead) -> Optional[ScriptResource]:
    """Register the script on ``head``; rejected input registers nothing."""
    parsed = parse_tracking_script(raw)
    if parsed is None:
        if raw and raw.strip():
            logger.warning("Invalid or unsafe tracking script provided; skipping injection")
        return None
    resource = build_script_resource(parsed)
    head.add_script(resource)
    logger.info("Injected %s tracking script", parsed.provider)
    return resource
