"""
Analytics providers accepted for card tracking scripts.

One ordered table drives both decisions: whether a script host is trusted
and which provider label it gets. A host is accepted when it equals one of
the listed domains or is a subdomain of it.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
import urllib.parse as urlparse

FALLBACK_PROVIDER = "Analytics"
ALLOWED_SCHEMES = frozenset({"http", "https"})
HOST_PATTERN = re.compile(r"[a-z0-9-]+(?:\.[a-z0-9-]+)*")


@dataclass(frozen=True)
class AnalyticsProvider:
    label: str
    domains: tuple[str, ...]

    def matches(self, host: str) -> bool:
        return any(host_matches(host, domain) for domain in self.domains)


# First match wins.
ANALYTICS_PROVIDERS: tuple[AnalyticsProvider, ...] = (
    AnalyticsProvider("Google Analytics", ("google-analytics.com", "googletagmanager.com", "analytics.google.com")),
    AnalyticsProvider("Umami", ("umami.is",)),
    AnalyticsProvider("Plausible", ("plausible.io",)),
    AnalyticsProvider("Simple Analytics", ("simpleanalytics.com",)),
    AnalyticsProvider("Hotjar", ("hotjar.com",)),
    AnalyticsProvider("FullStory", ("fullstory.com",)),
    AnalyticsProvider("Mixpanel", ("mixpanel.com",)),
)

ALLOWED_ANALYTICS_DOMAINS: frozenset[str] = frozenset(
    domain for provider in ANALYTICS_PROVIDERS for domain in provider.domains
)


def host_matches(host: str, domain: str) -> bool:
    return host == domain or host.endswith("." + domain)


def _has_unsafe_characters(url: str) -> bool:
    # Browsers treat a backslash as "/" and strip tabs and newlines from URLs.
    return any(ch == "\\" or ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url)


def script_host(url: str | None) -> Optional[str]:
    """Hostname of an absolute http(s) URL, or None when the URL is unusable.

    Fails closed on anything a browser could resolve to a different host than
    ``urlsplit`` does: backslashes, whitespace or control characters,
    credentials in the authority, percent-encoded or non-ASCII hosts and
    malformed ports.
    """
    if not url or not isinstance(url, str):
        return None
    candidate = url.strip()
    if _has_unsafe_characters(candidate):
        return None
    try:
        parsed = urlparse.urlsplit(candidate)
        host = parsed.hostname
        parsed.port  # ValueError on a malformed port
    except ValueError:
        return None
    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not host:
        return None
    if "@" in parsed.netloc:
        return None
    host = host.rstrip(".").lower()
    if not HOST_PATTERN.fullmatch(host):
        return None
    return host


def is_allowed_analytics_url(url: str | None) -> bool:
    """True iff ``url`` is absolute and its host is an allow-listed domain or subdomain."""
    host = script_host(url)
    if not host:
        return False
    return any(host_matches(host, domain) for domain in ALLOWED_ANALYTICS_DOMAINS)


def detect_provider(url: str | None) -> str:
    host = script_host(url)
    if host:
        for provider in ANALYTICS_PROVIDERS:
            if provider.matches(host):
                return provider.label
    return FALLBACK_PROVIDER


def provider_connect_sources(url: str | None) -> tuple[str, ...]:
    """CSP sources covering every domain of the provider serving ``url``.

    Providers load from one domain and beacon to another (Google Tag Manager
    reports to google-analytics.com), so ``connect-src`` needs all of them.
    """
    host = script_host(url)
    if not host:
        return ()
    for provider in ANALYTICS_PROVIDERS:
        if provider.matches(host):
            return tuple(source for domain in provider.domains for source in (f"https://{domain}", f"https://*.{domain}"))
    return ()
