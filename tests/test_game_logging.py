"""Tests for turning slash command options into game log payloads."""

from cogs.game_logging import GameLogging, build_log_payload
from conftest import DECK_ID, DECK_LINK
from validation import validate_game_log


def test_omitted_options_are_left_out():
    assert build_log_payload(title="Renamed") == {"title": "Renamed"}
    assert build_log_payload() == {}


def test_constructed_options():
    payload = build_log_payload(
        outcome="win",
        format="constructed",
        match_type="2v2",
        played_at="2026-10-18",
        duration=25,
        deck=DECK_ID,
        teammate_deck=DECK_LINK,
        opponents="Alice | fire; Bob",
    )
    assert payload["constructed"] == {"deckId": DECK_ID, "teammateExternalDeckUrl": DECK_LINK}
    assert [o["name"] for o in payload["opponents"]] == ["Alice", "Bob"]
    assert validate_game_log(payload, require_all=True).is_valid


def test_live_draft_options():
    payload = build_log_payload(
        outcome="loss",
        format="live_draft",
        match_type="ffa",
        played_at="2026-10-18T20:30:00Z",
        duration=40,
        elements="fire, metal",
        mvp_cards="card-1 card-2",
        public=True,
    )
    assert payload["liveDraft"] == {"elementsPlayed": ["Fire", "Metal"], "mvpCardIds": ["card-1", "card-2"]}
    assert payload["isPublic"] is True
    assert validate_game_log(payload, require_all=True).is_valid


def test_deck_link_is_told_apart_from_deck_id():
    payload = build_log_payload(deck=f"  {DECK_LINK} ")
    assert payload["constructed"] == {"externalDeckUrl": DECK_LINK}


def test_log_command_duration_defaults_to_float():
    parameter = GameLogging.log_game.get_parameter("duration")
    assert parameter.required is False
    assert parameter.default == 0.0
    assert isinstance(parameter.default, float)
