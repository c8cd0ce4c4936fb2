"""URL to registrable-domain normalization.

The registrable domain is approximated with a two/three-label heuristic
instead of the public suffix list: when both of the last two labels are at
most three characters long (``co.uk``, ``com.au``) three labels are kept,
otherwise two. This misfires on short second-level names such as
``www.bbc.com``, which normalizes to itself.
"""

import logging
import re
from collections.abc import Iterable
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")
# Letters (including IDN), digits, hyphen, underscore and dots only
_HOSTNAME_RE = re.compile(r"^[\w\-]+(\.[\w\-]+)*$")

SHORT_LABEL_MAX = 3


def with_scheme(url: str) -> str:
    """Trim ``url`` and prefix ``http://`` when it has no ``scheme://``."""
    candidate = url.strip()
    if not _SCHEME_RE.match(candidate):
        candidate = "http://" + candidate
    return candidate


def extract_hostname(url: str | None) -> str | None:
    """Return the lowercased hostname of ``url`` or None if it has none.

    Schemeless input (``example.com/path``) is treated as ``http://``.
    """
    if not url:
        return None

    try:
        hostname = urlsplit(with_scheme(url)).hostname
    except ValueError as e:
        logger.debug("Could not parse URL %r: %s", url, e)
        return None

    if not hostname:
        return None

    hostname = hostname.rstrip(".")
    if not _HOSTNAME_RE.match(hostname):
        logger.debug("Rejected hostname %r from URL %r", hostname, url)
        return None
    return hostname.lower()


def normalize_domain(url: str | None) -> str | None:
    """Reduce a URL to its registrable domain, e.g. ``foo.bbc.co.uk`` -> ``bbc.co.uk``.

    Returns None when the URL cannot be parsed; never raises.
    """
    return registrable_domain(extract_hostname(url))


def registrable_domain(hostname: str | None) -> str | None:
    """Apply the two/three-label heuristic to an already extracted hostname."""
    if not hostname:
        return None

    labels = hostname.split(".")
    if len(labels) < 2:
        return hostname

    if len(labels[-2]) <= SHORT_LABEL_MAX and len(labels[-1]) <= SHORT_LABEL_MAX:
        return ".".join(labels[-3:])
    return ".".join(labels[-2:])


def domain_matches(candidate: str, rule_domain: str) -> bool:
    """True if ``candidate`` is ``rule_domain`` or one of its subdomains."""
    return candidate == rule_domain or candidate.endswith("." + rule_domain)


def matches_any(candidate: str | None, rule_domains: Iterable[str]) -> bool:
    """True if ``candidate`` matches any entry of a user or system list."""
    if not candidate:
        return False
    for rule_domain in rule_domains:
        if not rule_domain:
            continue
        if domain_matches(candidate, rule_domain.strip().lower()):
            return True
    return False
