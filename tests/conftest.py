"""Shared fixtures for the game log tests."""

from datetime import datetime, timezone

import pytest

from models import ConstructedDetails, GameLog, LiveDraftDetails, Opponent

DECK_ID = "507f1f77bcf86cd799439011"
DECK_LINK = f"https://algomancer.cc/decks/{DECK_ID}"


@pytest.fixture
def constructed_payload():
    return {
        "title": "Test Log",
        "playedAt": "2026-10-14T18:30:00Z",
        "durationMinutes": 30,
        "outcome": "win",
        "format": "constructed",
        "matchType": "1v1",
        "isPublic": False,
        "opponents": [],
        "constructed": {"deckId": DECK_ID},
    }


@pytest.fixture
def live_draft_payload():
    return {
        "title": "Draft Night",
        "playedAt": "2026-10-14T18:30:00Z",
        "durationMinutes": 45,
        "outcome": "loss",
        "format": "live_draft",
        "matchType": "ffa",
        "isPublic": True,
        "opponents": [{"name": "Alice", "elements": ["Fire"], "mvpCardIds": ["card-9"]}],
        "liveDraft": {"elementsPlayed": ["Water", "Wood"], "mvpCardIds": ["card-1"]},
    }


@pytest.fixture
def make_log():
    """Factory for game log records with sensible defaults."""
    counter = {"id": 0}

    def _make(
        owner_id="owner-1",
        outcome="win",
        played_at=datetime(2026, 10, 14, 12, 0, tzinfo=timezone.utc),
        duration_minutes=30,
        match_type="1v1",
        details=None,
        is_public=False,
        include_in_community_stats=False,
        opponents=None,
    ):
        counter["id"] += 1
        return GameLog(
            id=counter["id"],
            owner_id=owner_id,
            played_at=played_at,
            duration_minutes=duration_minutes,
            outcome=outcome,
            match_type=match_type,
            details=details or ConstructedDetails(deck_id=DECK_ID),
            is_public=is_public,
            include_in_community_stats=include_in_community_stats,
            opponents=opponents or [],
        )

    return _make


def live_draft(elements, mvp_card_ids=None):
    return LiveDraftDetails(elements_played=list(elements), mvp_card_ids=list(mvp_card_ids or []))


def opponent(name, mvp_card_ids=None, elements=None):
    return Opponent(name=name, elements=list(elements or []), mvp_card_ids=list(mvp_card_ids or []))
