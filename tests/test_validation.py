"""Tests for game log validation."""

import pytest

from conftest import DECK_ID, DECK_LINK
from validation import validate_game_log


def test_accepts_valid_constructed_log(constructed_payload):
    result = validate_game_log(constructed_payload, require_all=True)
    assert result.is_valid
    assert result.errors == []
    assert result.field_errors == {}


def test_accepts_valid_live_draft_log(live_draft_payload):
    result = validate_game_log(live_draft_payload, require_all=True)
    assert result.is_valid, result.errors


def test_to_dict_uses_wire_names(constructed_payload):
    constructed_payload["durationMinutes"] = 5000
    data = validate_game_log(constructed_payload, require_all=True).to_dict()
    assert data["isValid"] is False
    assert data["fieldErrors"]["durationMinutes"] == data["errors"]


# Scalar fields

def test_blank_title_is_allowed(constructed_payload):
    constructed_payload["title"] = "   "
    assert validate_game_log(constructed_payload, require_all=True).is_valid


def test_missing_title_is_allowed(constructed_payload):
    del constructed_payload["title"]
    assert validate_game_log(constructed_payload, require_all=True).is_valid


@pytest.mark.parametrize("title", ["ab", "x" * 81, 42])
def test_rejects_bad_title(constructed_payload, title):
    constructed_payload["title"] = title
    result = validate_game_log(constructed_payload, require_all=True)
    assert not result.is_valid
    assert list(result.field_errors) == ["title"]


@pytest.mark.parametrize("duration", [1500, -1, "abc", True, None])
def test_rejects_bad_duration(constructed_payload, duration):
    constructed_payload["durationMinutes"] = duration
    result = validate_game_log(constructed_payload, require_all=True)
    assert not result.is_valid
    assert list(result.field_errors) == ["durationMinutes"]


@pytest.mark.parametrize("duration", [0, 1440, "90"])
def test_accepts_duration_bounds(constructed_payload, duration):
    constructed_payload["durationMinutes"] = duration
    assert validate_game_log(constructed_payload, require_all=True).is_valid


def test_rejects_long_notes(constructed_payload):
    constructed_payload["notes"] = "n" * 1001
    result = validate_game_log(constructed_payload, require_all=True)
    assert list(result.field_errors) == ["notes"]


def test_accepts_notes_at_limit(constructed_payload):
    constructed_payload["notes"] = "n" * 1000
    assert validate_game_log(constructed_payload, require_all=True).is_valid


@pytest.mark.parametrize(
    "field, value",
    [("outcome", "tie"), ("format", "sealed"), ("matchType", "3v3")],
)
def test_rejects_unknown_enum_values(constructed_payload, field, value):
    constructed_payload[field] = value
    result = validate_game_log(constructed_payload, require_all=True)
    assert not result.is_valid
    assert field in result.field_errors


@pytest.mark.parametrize(
    "played_at",
    ["not a date", None, 12, "0001-01-01T00:00:00+05:00", "9999-12-31T23:00:00-05:00"],
)
def test_rejects_bad_played_at(constructed_payload, played_at):
    constructed_payload["playedAt"] = played_at
    result = validate_game_log(constructed_payload, require_all=True)
    assert list(result.field_errors) == ["playedAt"]


def test_rejects_non_boolean_visibility(constructed_payload):
    constructed_payload["isPublic"] = "yes"
    constructed_payload["includeInCommunityStats"] = 1
    result = validate_game_log(constructed_payload, require_all=True)
    assert set(result.field_errors) == {"isPublic", "includeInCommunityStats"}


def test_collects_every_failure(constructed_payload):
    constructed_payload["title"] = "ab"
    constructed_payload["durationMinutes"] = 2000
    constructed_payload["outcome"] = "tie"
    result = validate_game_log(constructed_payload, require_all=True)
    assert set(result.field_errors) == {"title", "durationMinutes", "outcome"}
    assert len(result.errors) == 3


# Match type label

@pytest.mark.parametrize("label", ["", "   ", None])
def test_custom_match_type_requires_label(constructed_payload, label):
    constructed_payload["matchType"] = "custom"
    constructed_payload["matchTypeLabel"] = label
    result = validate_game_log(constructed_payload, require_all=True)
    assert not result.is_valid
    assert result.field_errors["matchTypeLabel"]


def test_custom_match_type_label_length(constructed_payload):
    constructed_payload["matchType"] = "custom"
    constructed_payload["matchTypeLabel"] = "x"
    assert "matchTypeLabel" in validate_game_log(constructed_payload, require_all=True).field_errors

    constructed_payload["matchTypeLabel"] = "y" * 41
    assert "matchTypeLabel" in validate_game_log(constructed_payload, require_all=True).field_errors

    constructed_payload["matchTypeLabel"] = "Two-Headed Giant"
    assert validate_game_log(constructed_payload, require_all=True).is_valid


@pytest.mark.parametrize("label", [None, "", "   ", "Pauper"])
def test_non_custom_match_type_does_not_require_label(constructed_payload, label):
    constructed_payload["matchType"] = "1v1"
    constructed_payload["matchTypeLabel"] = label
    assert validate_game_log(constructed_payload, require_all=True).is_valid


@pytest.mark.parametrize("label", ["x", "z" * 41, "z" * 200])
def test_non_custom_match_type_still_bounds_label_length(constructed_payload, label):
    constructed_payload["matchType"] = "1v1"
    constructed_payload["matchTypeLabel"] = label
    result = validate_game_log(constructed_payload, require_all=True)
    assert list(result.field_errors) == ["matchTypeLabel"]


def test_partial_label_is_bounded_on_stored_non_custom_log(constructed_payload):
    result = validate_game_log({"matchTypeLabel": "x"}, require_all=False, existing=constructed_payload)
    assert list(result.field_errors) == ["matchTypeLabel"]


# Opponents

def test_allows_empty_opponent_rows(constructed_payload):
    constructed_payload["opponents"] = [
        {"name": "", "elements": [], "externalDeckUrl": "", "mvpCardIds": []}
    ]
    assert validate_game_log(constructed_payload, require_all=True).is_valid


def test_opponent_details_require_a_name(constructed_payload):
    constructed_payload["opponents"] = [{"name": "", "elements": ["Fire"]}]
    result = validate_game_log(constructed_payload, require_all=True)
    assert not result.is_valid
    assert result.field_errors["opponents.0.name"]


@pytest.mark.parametrize("name", ["A", "B" * 41])
def test_opponent_name_length(constructed_payload, name):
    constructed_payload["opponents"] = [{"name": name}]
    result = validate_game_log(constructed_payload, require_all=True)
    assert list(result.field_errors) == ["opponents.0.name"]


def test_opponent_element_must_be_basic(constructed_payload):
    constructed_payload["opponents"] = [{"name": "Alice", "elements": ["Fire", "Plasma"]}]
    result = validate_game_log(constructed_payload, require_all=True)
    assert list(result.field_errors) == ["opponents.0.elements.1"]


def test_opponent_deck_link_must_be_allow_listed(constructed_payload):
    constructed_payload["opponents"] = [
        {"name": "Alice", "externalDeckUrl": f"https://example.com/decks/{DECK_ID}"},
        {"name": "Bob", "externalDeckUrl": "definitely not a url"},
        {"name": "Cleo", "externalDeckUrl": DECK_LINK},
    ]
    result = validate_game_log(constructed_payload, require_all=True)
    assert set(result.field_errors) == {"opponents.0.externalDeckUrl", "opponents.1.externalDeckUrl"}


def test_opponent_mvp_cards_are_deduplicated_before_the_cap(constructed_payload):
    constructed_payload["opponents"] = [{"name": "Alice", "mvpCardIds": ["a", "a", "b", "c"]}]
    assert validate_game_log(constructed_payload, require_all=True).is_valid

    constructed_payload["opponents"] = [{"name": "Alice", "mvpCardIds": ["a", "b", "c", "d"]}]
    result = validate_game_log(constructed_payload, require_all=True)
    assert list(result.field_errors) == ["opponents.0.mvpCardIds"]


def test_opponent_errors_are_addressed_by_index(constructed_payload):
    constructed_payload["opponents"] = [
        {"name": "Alice"},
        {"name": "Bob"},
        {"name": "Cleo", "mvpCardIds": ["", "card-1"]},
    ]
    result = validate_game_log(constructed_payload, require_all=True)
    assert list(result.field_errors) == ["opponents.2.mvpCardIds.0"]


def test_opponents_must_be_a_list(constructed_payload):
    constructed_payload["opponents"] = "Alice"
    result = validate_game_log(constructed_payload, require_all=True)
    assert list(result.field_errors) == ["opponents"]


# Constructed

def test_rejects_constructed_with_both_deck_references(constructed_payload):
    constructed_payload["constructed"] = {"deckId": DECK_ID, "externalDeckUrl": DECK_LINK}
    result = validate_game_log(constructed_payload, require_all=True)
    assert not result.is_valid
    assert result.field_errors["constructed"]


def test_rejects_constructed_without_deck_reference(constructed_payload):
    constructed_payload["constructed"] = {}
    result = validate_game_log(constructed_payload, require_all=True)
    assert result.field_errors["constructed"]


def test_accepts_constructed_with_deck_link_only(constructed_payload):
    constructed_payload["constructed"] = {"externalDeckUrl": DECK_LINK}
    assert validate_game_log(constructed_payload, require_all=True).is_valid


def test_rejects_non_allow_listed_deck_link(constructed_payload):
    constructed_payload["constructed"] = {
        "externalDeckUrl": f"https://example.com/decks/{DECK_ID}",
    }
    result = validate_game_log(constructed_payload, require_all=True)
    assert not result.is_valid
    assert result.field_errors["constructed.externalDeckUrl"]


def test_rejects_malformed_deck_id(constructed_payload):
    constructed_payload["constructed"] = {"deckId": "not-a-deck"}
    result = validate_game_log(constructed_payload, require_all=True)
    assert list(result.field_errors) == ["constructed.deckId"]


def test_requires_constructed_block_for_constructed_format(constructed_payload):
    del constructed_payload["constructed"]
    result = validate_game_log(constructed_payload, require_all=True)
    assert list(result.field_errors) == ["constructed"]


def test_teammate_deck_is_optional_even_for_2v2(constructed_payload):
    constructed_payload["matchType"] = "2v2"
    assert validate_game_log(constructed_payload, require_all=True).is_valid


def test_teammate_deck_references_are_exclusive(constructed_payload):
    constructed_payload["constructed"] = {
        "deckId": DECK_ID,
        "teammateDeckId": DECK_ID,
        "teammateExternalDeckUrl": DECK_LINK,
    }
    result = validate_game_log(constructed_payload, require_all=True)
    assert result.field_errors["constructed"]


# Live draft

def test_requires_live_draft_elements(live_draft_payload):
    live_draft_payload["liveDraft"] = {"elementsPlayed": []}
    result = validate_game_log(live_draft_payload, require_all=True)
    assert not result.is_valid
    assert result.field_errors["liveDraft.elementsPlayed"]


def test_rejects_too_many_live_draft_elements(live_draft_payload):
    live_draft_payload["liveDraft"] = {
        "elementsPlayed": ["Fire", "Water", "Earth", "Wood", "Metal", "Fire"],
    }
    result = validate_game_log(live_draft_payload, require_all=True)
    assert result.field_errors["liveDraft.elementsPlayed"]


def test_rejects_unknown_live_draft_element(live_draft_payload):
    live_draft_payload["liveDraft"] = {"elementsPlayed": ["Fire", "Shadow"]}
    result = validate_game_log(live_draft_payload, require_all=True)
    assert list(result.field_errors) == ["liveDraft.elementsPlayed.1"]


def test_caps_live_draft_mvp_cards(live_draft_payload):
    live_draft_payload["liveDraft"]["mvpCardIds"] = ["a", "b", "c", "d"]
    result = validate_game_log(live_draft_payload, require_all=True)
    assert list(result.field_errors) == ["liveDraft.mvpCardIds"]


def test_requires_live_draft_block_for_live_draft_format(live_draft_payload):
    del live_draft_payload["liveDraft"]
    result = validate_game_log(live_draft_payload, require_all=True)
    assert list(result.field_errors) == ["liveDraft"]


# Variant exclusivity

def test_rejects_live_draft_block_on_constructed_log(constructed_payload):
    constructed_payload["liveDraft"] = {"elementsPlayed": ["Fire"]}
    result = validate_game_log(constructed_payload, require_all=True)
    assert not result.is_valid
    assert result.field_errors["liveDraft"]


def test_rejects_constructed_block_on_live_draft_log(live_draft_payload):
    live_draft_payload["constructed"] = {"deckId": DECK_ID}
    result = validate_game_log(live_draft_payload, require_all=True)
    assert not result.is_valid
    assert result.field_errors["constructed"]


# Partial updates

def test_partial_update_checks_only_supplied_fields():
    assert validate_game_log({"title": "Renamed"}, require_all=False).is_valid
    assert validate_game_log({}, require_all=False).is_valid


def test_partial_update_with_details_requires_format():
    result = validate_game_log({"constructed": {"deckId": DECK_ID}}, require_all=False)
    assert not result.is_valid
    assert result.field_errors["format"]


def test_partial_update_to_custom_uses_stored_label(constructed_payload):
    patch = {"matchType": "custom"}
    assert not validate_game_log(patch, require_all=False).is_valid

    existing = dict(constructed_payload, matchTypeLabel="Pauper Cube")
    assert validate_game_log(patch, require_all=False, existing=existing).is_valid


def test_partial_update_clearing_custom_label_fails(constructed_payload):
    existing = dict(constructed_payload, matchType="custom", matchTypeLabel="Pauper Cube")
    result = validate_game_log({"matchTypeLabel": ""}, require_all=False, existing=existing)
    assert result.field_errors["matchTypeLabel"]


def test_partial_update_restating_format_keeps_stored_block(constructed_payload):
    patch = {"format": "constructed"}
    assert not validate_game_log(patch, require_all=False).is_valid
    assert validate_game_log(patch, require_all=False, existing=constructed_payload).is_valid


def test_partial_update_switching_format_needs_new_block(constructed_payload):
    result = validate_game_log({"format": "live_draft"}, require_all=False, existing=constructed_payload)
    assert list(result.field_errors) == ["liveDraft"]


def test_rejects_non_object_payload():
    result = validate_game_log(["not", "a", "dict"], require_all=True)
    assert not result.is_valid
    assert result.field_errors["payload"]
