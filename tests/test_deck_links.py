"""Tests for deck link checks."""

import pytest

from conftest import DECK_ID
from utils.deck_links import is_http_url, is_valid_deck_link, is_valid_object_id, parse_deck_link_id


@pytest.mark.parametrize(
    "url",
    [
        f"https://algomancer.cc/decks/{DECK_ID}",
        f"https://www.algomancer.cc/decks/{DECK_ID}",
        f"https://algomancer.gg/decks/{DECK_ID}",
        f"http://www.algomancer.gg/decks/{DECK_ID}/",
        f"https://ALGOMANCER.CC/decks/{DECK_ID}?tab=cards",
    ],
)
def test_accepts_allow_listed_deck_links(url):
    assert is_valid_deck_link(url)
    assert parse_deck_link_id(url) == DECK_ID


@pytest.mark.parametrize(
    "url",
    [
        f"https://example.com/decks/{DECK_ID}",
        f"https://algomancer.cc.evil.com/decks/{DECK_ID}",
        "https://algomancer.cc/decks/not-a-deck-id",
        f"https://algomancer.cc/cards/{DECK_ID}",
        f"ftp://algomancer.cc/decks/{DECK_ID}",
        "algomancer.cc/decks/" + DECK_ID,
    ],
)
def test_rejects_other_links(url):
    assert not is_valid_deck_link(url)


@pytest.mark.parametrize(
    "value, expected",
    [("https://example.com", True), ("http://a.b/c", True), ("mailto:x@y.z", False), ("nope", False)],
)
def test_is_http_url(value, expected):
    assert is_http_url(value) is expected


@pytest.mark.parametrize(
    "value, expected",
    [(DECK_ID, True), (DECK_ID.upper(), True), (DECK_ID[:-1], False), ("z" * 24, False), (None, False)],
)
def test_is_valid_object_id(value, expected):
    assert is_valid_object_id(value) is expected
