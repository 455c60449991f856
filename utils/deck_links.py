"""Deck link checks for externally hosted decks."""

import re
from typing import Optional
from urllib.parse import urlparse

from config import DECK_LINK_HOSTS

DECK_PATH_PATTERN = re.compile(r"^/decks/([0-9a-fA-F]{24})(?:/|$)")
OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


def is_http_url(value: str) -> bool:
    """Check that a string is a well-formed http(s) URL with a host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def parse_deck_link_id(value: str) -> Optional[str]:
    """
    Extract the deck id from an allow-listed deck link.

    Returns None for anything that is not ``https://<allowed host>/decks/<id>``.
    """
    if not is_http_url(value):
        return None
    parsed = urlparse(value)
    if (parsed.hostname or "").lower() not in DECK_LINK_HOSTS:
        return None
    match = DECK_PATH_PATTERN.match(parsed.path)
    if not match:
        return None
    return match.group(1)


def is_valid_deck_link(value: str) -> bool:
    return parse_deck_link_id(value) is not None


def is_valid_object_id(value) -> bool:
    """Deck ids are 24 character hex strings."""
    return isinstance(value, str) and bool(OBJECT_ID_PATTERN.match(value))
