"""Hard-coded allow rules evaluated before any user policy.

These checks are cheap, deterministic and hit on a large share of traffic,
so they run first and never reach the AI judge. They cannot be overridden by
a user's block list.
"""

import logging
from urllib.parse import parse_qs, urlsplit

from .domains import matches_any, with_scheme
from .verdicts import AuditReason, Decision, Verdict

logger = logging.getLogger(__name__)

# Operator-owned hosts: dashboard/backend hosting, database, sign-in, site
INFRA_DOMAINS: tuple[str, ...] = (
    "onrender.com",
    "supabase.co",
    "accounts.google.com",
    "vercel.app",
    "beaconblocker.com",
)

# Hostname prefix (after dropping "www.") -> display name
SEARCH_ENGINES: tuple[tuple[str, str], ...] = (
    ("google.", "Google"),
    ("bing.", "Bing"),
    ("duckduckgo.", "DuckDuckGo"),
    ("search.yahoo.", "Yahoo"),
    ("ecosia.", "Ecosia"),
    ("search.brave.", "Brave"),
    ("yandex.", "Yandex"),
)
SEARCH_PATHS = frozenset({"", "/", "/search", "/webhp", "/html", "/web"})
SEARCH_QUERY_PARAMS: tuple[str, ...] = ("q", "p", "text")

VIDEO_PLATFORM_HOSTS = frozenset({"youtube.com", "www.youtube.com", "m.youtube.com"})
VIDEO_PLAYBACK_PREFIXES: tuple[str, ...] = ("/watch", "/shorts", "/live", "/embed")
VIDEO_QUERY_PARAM = "search_query"


def _split(url: str) -> tuple[str, dict[str, list[str]]]:
    """Return the path and parsed query string of ``url``; empty on failure."""
    try:
        parts = urlsplit(with_scheme(url))
    except ValueError:
        return "", {}
    return parts.path, parse_qs(parts.query)


def _first_param(query: dict[str, list[str]], names: tuple[str, ...]) -> str | None:
    for name in names:
        values = query.get(name)
        if values and values[0].strip():
            return values[0].strip()
    return None


def is_infra(hostname: str | None, domain: str | None) -> bool:
    return matches_any(hostname, INFRA_DOMAINS) or matches_any(domain, INFRA_DOMAINS)


def search_engine_name(hostname: str | None) -> str | None:
    """Display name of the search engine serving ``hostname``, if any."""
    if not hostname:
        return None
    host = hostname.removeprefix("www.")
    for marker, name in SEARCH_ENGINES:
        if host.startswith(marker):
            return name
    return None


def evaluate_system_policy(
    url: str,
    hostname: str | None,
    domain: str | None,
    title: str | None = None,
    search_query: str | None = None,
) -> Verdict | None:
    """Apply infra, search-engine and video-browsing allows, in that order.

    Returns None when no system rule applies and user policy should decide.
    """
    if is_infra(hostname, domain):
        logger.info("System allow: %s (infra)", hostname or domain)
        return Verdict(Decision.ALLOW, AuditReason.INFRA, title)

    if not hostname:
        return None

    path, query = _split(url)

    engine = search_engine_name(hostname)
    if engine and path in SEARCH_PATHS:
        search = (search_query or "").strip() or _first_param(query, SEARCH_QUERY_PARAMS)
        display = f'{engine} Search: "{search}"' if search else f"{engine} Home"
        logger.info("System allow: %s (search)", display)
        return Verdict(Decision.ALLOW, AuditReason.SEARCH, display)

    if hostname in VIDEO_PLATFORM_HOSTS and not path.startswith(VIDEO_PLAYBACK_PREFIXES):
        display = (
            (search_query or "").strip()
            or _first_param(query, (VIDEO_QUERY_PARAM,))
            or title
        )
        logger.info("System allow: %s%s (navigation)", hostname, path)
        return Verdict(Decision.ALLOW, AuditReason.NAVIGATION, display)

    return None
