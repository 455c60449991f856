"""Tests for payload normalization and record construction."""

from datetime import datetime, timezone

import pytest

from conftest import DECK_ID
from models import ConstructedDetails, LiveDraftDetails, Opponent
from payload import build_game_log, normalize_game_log_payload, resolve_community_flag


def test_trims_strings_and_parses_played_at():
    normalized = normalize_game_log_payload({
        "title": "  Friday Night  ",
        "playedAt": "2026-10-14T18:30:00Z",
        "notes": "  close game ",
        "matchTypeLabel": "  ",
    })
    assert normalized["title"] == "Friday Night"
    assert normalized["playedAt"] == datetime(2026, 10, 14, 18, 30, tzinfo=timezone.utc)
    assert normalized["notes"] == "close game"
    assert normalized["matchTypeLabel"] == ""


def test_blank_title_falls_back_to_default():
    assert normalize_game_log_payload({"title": "   "})["title"] == "Untitled Game"


def test_only_present_keys_are_returned():
    assert normalize_game_log_payload({"outcome": "draw"}) == {"outcome": "draw"}


@pytest.mark.parametrize("raw, expected", [("45", 45), (45.0, 45), (12.5, 12.5), (0, 0)])
def test_duration_becomes_a_number(raw, expected):
    assert normalize_game_log_payload({"durationMinutes": raw})["durationMinutes"] == expected


def test_drops_empty_opponent_rows_and_dedupes_cards():
    normalized = normalize_game_log_payload({
        "opponents": [
            {"name": "", "elements": [], "externalDeckUrl": "", "mvpCardIds": []},
            {"name": " Alice ", "elements": ["Fire"], "mvpCardIds": ["a", " a", "b", ""]},
        ],
    })
    assert normalized["opponents"] == [
        {"name": "Alice", "elements": ["Fire"], "mvpCardIds": ["a", "b"]},
    ]


def test_opponent_rows_with_any_detail_are_kept():
    link = f"https://algomancer.gg/decks/{DECK_ID}"
    normalized = normalize_game_log_payload({
        "opponents": [{"externalDeckUrl": link}, {"mvpCardIds": ["c1"]}, {"name": "  "}],
    })
    assert [o.get("externalDeckUrl") for o in normalized["opponents"]] == [link, None]
    assert normalized["opponents"][1]["mvpCardIds"] == ["c1"]


def test_opponent_is_empty():
    assert Opponent().is_empty()
    assert Opponent(user_id="user-7").is_empty()
    assert not Opponent(elements=["Fire"]).is_empty()
    assert not Opponent(name="Alice").is_empty()


def test_constructed_keeps_only_non_empty_references():
    normalized = normalize_game_log_payload({
        "constructed": {"deckId": f" {DECK_ID} ", "externalDeckUrl": "", "teammateDeckId": None},
    })
    assert normalized["constructed"] == {"deckId": DECK_ID}


def test_live_draft_card_ids_are_deduplicated():
    normalized = normalize_game_log_payload({
        "liveDraft": {"elementsPlayed": ["Fire", "Wood"], "mvpCardIds": ["x", "x", "y"]},
    })
    assert normalized["liveDraft"] == {"elementsPlayed": ["Fire", "Wood"], "mvpCardIds": ["x", "y"]}


@pytest.mark.parametrize(
    "is_public, include_private, expected",
    [(True, False, True), (True, True, True), (False, True, True), (False, False, False)],
)
def test_resolve_community_flag(is_public, include_private, expected):
    assert resolve_community_flag(is_public, include_private) is expected


def test_build_game_log_from_constructed_payload(constructed_payload):
    record = build_game_log(normalize_game_log_payload(constructed_payload), "owner-1")

    assert record.owner_id == "owner-1"
    assert record.format == "constructed"
    assert record.details == ConstructedDetails(deck_id=DECK_ID)
    assert record.played_at == datetime(2026, 10, 14, 18, 30, tzinfo=timezone.utc)
    assert record.is_public is False
    assert record.include_in_community_stats is False


def test_build_game_log_drops_inactive_arm_and_stale_label(live_draft_payload):
    live_draft_payload["constructed"] = {"deckId": DECK_ID}
    live_draft_payload["matchTypeLabel"] = "Leftover"
    record = build_game_log(normalize_game_log_payload(live_draft_payload), "owner-1")

    assert isinstance(record.details, LiveDraftDetails)
    assert record.match_type_label is None
    assert "constructed" not in record.to_document()


def test_build_game_log_counts_private_logs_on_opt_in(constructed_payload):
    normalized = normalize_game_log_payload(constructed_payload)
    assert build_game_log(normalized, "owner-1").include_in_community_stats is False
    opted_in = build_game_log(normalized, "owner-1", include_private_in_community=True)
    assert opted_in.include_in_community_stats is True


def test_build_game_log_public_counts_toward_community(live_draft_payload):
    record = build_game_log(normalize_game_log_payload(live_draft_payload), "owner-1")
    assert record.is_public is True
    assert record.include_in_community_stats is True


def test_build_game_log_defaults_missing_title(constructed_payload):
    del constructed_payload["title"]
    record = build_game_log(normalize_game_log_payload(constructed_payload), "owner-1")
    assert record.title == "Untitled Game"
