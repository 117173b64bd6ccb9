"""
Predicates used by the integrity validator.

Text, identifier, URL and email checks. Each returns a bool except where a
value cannot be interpreted at all (malformed URL), which raises.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from stickerpacks.errors import LinkViolation

# Letters, digits, underscore, hyphen, dot, apostrophe and space
IDENTIFIER_PATTERN = re.compile(r"[\w\-.' ]+", re.ASCII)

EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9+._%\-]{1,256}"
    r"@"
    r"[a-zA-Z0-9][a-zA-Z0-9\-]{0,64}"
    r"(\.[a-zA-Z0-9][a-zA-Z0-9\-]{0,25})+"
)

ALLOWED_URL_SCHEMES = frozenset({"http", "https"})


def is_empty(value: str | None) -> bool:
    """True for None and the empty string."""
    return value is None or value == ""


def has_valid_identifier_chars(value: str) -> bool:
    """Check value against the identifier character class."""
    return IDENTIFIER_PATTERN.fullmatch(value) is not None


def is_valid_email(value: str) -> bool:
    """Check value against the email address pattern."""
    return EMAIL_PATTERN.fullmatch(value) is not None


def _split_url(url: str) -> tuple[str, str | None]:
    """Return (scheme, host) or raise LinkViolation if url cannot be parsed."""
    try:
        parts = urlsplit(url)
        host = parts.hostname
        # Accessing port validates it
        _ = parts.port
    except ValueError as e:
        raise LinkViolation(f"url: {url} is malformed") from e
    if not parts.scheme or not parts.netloc or any(c.isspace() for c in url):
        raise LinkViolation(f"url: {url} is malformed")
    return parts.scheme.lower(), host


def is_valid_website_url(url: str) -> bool:
    """Absolute URL using http or https.

    Raises:
        LinkViolation: If url is malformed.
    """
    scheme, host = _split_url(url)
    return scheme in ALLOWED_URL_SCHEMES and bool(host)


def is_url_in_domain(url: str, domain: str) -> bool:
    """Host of url equals domain exactly.

    Raises:
        LinkViolation: If url is malformed.
    """
    _, host = _split_url(url)
    return host == domain
