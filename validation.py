"""Validation of game log payloads.

Payloads use the camelCase wire names. Every rule is checked independently and
all failures are collected; nothing here raises. Field paths in
``field_errors`` use dot/index notation, e.g. ``opponents.2.mvpCardIds.0``.
"""

import math
from typing import Any, Optional

from config import (
    BASIC_ELEMENTS,
    FORMATS,
    FORMAT_CONSTRUCTED,
    FORMAT_LIVE_DRAFT,
    MATCH_TYPES,
    MATCH_TYPE_CUSTOM,
    MATCH_TYPE_LABEL_MAX,
    MATCH_TYPE_LABEL_MIN,
    MVP_CARDS_MAX,
    NOTES_MAX,
    OPPONENT_NAME_MAX,
    OPPONENT_NAME_MIN,
    OUTCOMES,
    DURATION_MAX,
    TITLE_MAX,
    TITLE_MIN,
)
from models import ValidationResult
from utils.dates import to_utc
from utils.deck_links import is_http_url, is_valid_deck_link, is_valid_object_id


def _supplied(data: dict, key: str) -> bool:
    return data.get(key) is not None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_deck_link(result: ValidationResult, path: str, value: Any, label: str) -> None:
    """Deck links must be http(s) URLs on an allow-listed deck host."""
    if value is None:
        return
    if not isinstance(value, str):
        result.add(path, f"{label} must be a string")
        return
    text = value.strip()
    if not text:
        return
    if not is_http_url(text):
        result.add(path, f"{label} is invalid")
    elif not is_valid_deck_link(text):
        result.add(path, f"{label} must be an Algomancer deck link")


def _check_mvp_cards(result: ValidationResult, path: str, value: Any, label: str) -> None:
    if value is None:
        return
    if not isinstance(value, list):
        result.add(path, f"{label} must be a list")
        return
    unique = set()
    for index, card_id in enumerate(value):
        if not isinstance(card_id, str) or not card_id.strip():
            result.add(f"{path}.{index}", f"{label} must be card id strings")
        else:
            unique.add(card_id.strip())
    if len(unique) > MVP_CARDS_MAX:
        result.add(path, f"{label} max is {MVP_CARDS_MAX}")


def _check_elements(result: ValidationResult, path: str, value: list, message: str) -> None:
    for index, element in enumerate(value):
        if element not in BASIC_ELEMENTS:
            result.add(f"{path}.{index}", message)


def _check_scalars(result: ValidationResult, data: dict, require_all: bool) -> None:
    # A missing or blank title falls back to the default title.
    if _supplied(data, "title"):
        title = data["title"]
        if not isinstance(title, str):
            result.add("title", "title must be a string")
        else:
            trimmed = title.strip()
            if trimmed and len(trimmed) < TITLE_MIN:
                result.add("title", f"title must be at least {TITLE_MIN} characters")
            elif len(trimmed) > TITLE_MAX:
                result.add("title", f"title must be {TITLE_MAX} characters or less")

    if require_all or _supplied(data, "playedAt"):
        try:
            to_utc(data.get("playedAt"))
        except (TypeError, ValueError):
            result.add("playedAt", "playedAt must be a valid date")

    if require_all or _supplied(data, "durationMinutes"):
        duration = data.get("durationMinutes")
        if isinstance(duration, str):
            try:
                duration = float(duration.strip())
            except ValueError:
                duration = None
        if not _is_number(duration) or math.isnan(duration):
            result.add("durationMinutes", "durationMinutes must be a number")
        elif duration < 0:
            result.add("durationMinutes", "durationMinutes must be 0 or greater")
        elif duration > DURATION_MAX:
            result.add("durationMinutes", f"durationMinutes must be {DURATION_MAX} or less")

    if require_all or _supplied(data, "outcome"):
        if data.get("outcome") not in OUTCOMES:
            result.add("outcome", "outcome must be win, loss, or draw")

    if require_all or _supplied(data, "format"):
        if data.get("format") not in FORMATS:
            result.add("format", "format must be constructed or live_draft")

    if require_all or _supplied(data, "matchType"):
        if data.get("matchType") not in MATCH_TYPES:
            result.add("matchType", "matchType must be 1v1, 2v2, ffa, or custom")

    for flag in ("isPublic", "includeInCommunityStats"):
        if _supplied(data, flag) and not isinstance(data[flag], bool):
            result.add(flag, f"{flag} must be a boolean")

    if _supplied(data, "notes"):
        notes = data["notes"]
        if not isinstance(notes, str):
            result.add("notes", "notes must be a string")
        elif len(notes.strip()) > NOTES_MAX:
            result.add("notes", f"notes must be {NOTES_MAX} characters or less")


def _check_match_type_label(
    result: ValidationResult, data: dict, existing: dict, require_all: bool
) -> None:
    match_type = data["matchType"] if "matchType" in data else existing.get("matchType")

    # A non-blank label is bounded whatever the match type; it is only
    # required for custom.
    if _supplied(data, "matchTypeLabel"):
        label = data["matchTypeLabel"]
        if not isinstance(label, str):
            result.add("matchTypeLabel", "matchTypeLabel must be a string")
        else:
            trimmed = label.strip()
            if trimmed and len(trimmed) < MATCH_TYPE_LABEL_MIN:
                result.add("matchTypeLabel", "matchTypeLabel is too short")
            elif len(trimmed) > MATCH_TYPE_LABEL_MAX:
                result.add("matchTypeLabel", "matchTypeLabel is too long")

    touched = require_all or "matchType" in data or "matchTypeLabel" in data
    if not touched or match_type != MATCH_TYPE_CUSTOM:
        return
    label = data["matchTypeLabel"] if "matchTypeLabel" in data else existing.get("matchTypeLabel")
    if label is None or (isinstance(label, str) and not label.strip()):
        result.add("matchTypeLabel", "matchTypeLabel is required for custom match type")


def _check_opponent(result: ValidationResult, index: int, opponent: Any) -> None:
    prefix = f"opponents.{index}"
    if not isinstance(opponent, dict):
        result.add(prefix, "opponent must be an object")
        return

    name = opponent.get("name")
    name_value = name.strip() if isinstance(name, str) else ""
    elements = opponent.get("elements")
    external = opponent.get("externalDeckUrl")
    mvp_ids = opponent.get("mvpCardIds")

    has_details = (
        (isinstance(elements, list) and len(elements) > 0)
        or (isinstance(external, str) and bool(external.strip()))
        or (isinstance(mvp_ids, list) and len(mvp_ids) > 0)
    )

    if name is not None and not isinstance(name, str):
        result.add(f"{prefix}.name", "opponent name must be a string")
    elif not name_value and has_details:
        result.add(f"{prefix}.name", "opponent name is required")
    elif name_value and len(name_value) < OPPONENT_NAME_MIN:
        result.add(f"{prefix}.name", "opponent name is too short")
    elif len(name_value) > OPPONENT_NAME_MAX:
        result.add(f"{prefix}.name", "opponent name is too long")

    user_id = opponent.get("userId")
    if user_id is not None and (not isinstance(user_id, str) or not user_id.strip()):
        result.add(f"{prefix}.userId", "opponent userId is invalid")

    if elements is not None:
        if not isinstance(elements, list):
            result.add(f"{prefix}.elements", "opponent elements must be a list")
        else:
            _check_elements(result, f"{prefix}.elements", elements, "opponent element is invalid")

    _check_deck_link(result, f"{prefix}.externalDeckUrl", external, "opponent externalDeckUrl")
    _check_mvp_cards(result, f"{prefix}.mvpCardIds", mvp_ids, "opponent mvpCardIds")


def _check_opponents(result: ValidationResult, data: dict) -> None:
    if not _supplied(data, "opponents"):
        return
    opponents = data["opponents"]
    if not isinstance(opponents, list):
        result.add("opponents", "opponents must be a list")
        return
    for index, opponent in enumerate(opponents):
        _check_opponent(result, index, opponent)


def _check_deck_pair(
    result: ValidationResult,
    block: dict,
    id_key: str,
    url_key: str,
    required: bool,
) -> None:
    """One deck reference: an internal id xor an external link."""
    deck_id = block.get(id_key)
    url = block.get(url_key)
    has_id = bool(deck_id)
    has_url = isinstance(url, str) and bool(url.strip())

    if required and not has_id and not has_url:
        result.add("constructed", f"constructed requires {id_key} or {url_key}")
    if has_id and has_url:
        result.add("constructed", f"constructed requires only one of {id_key} or {url_key}")

    if has_id and not is_valid_object_id(deck_id):
        result.add(f"constructed.{id_key}", f"{id_key} is invalid")
    _check_deck_link(result, f"constructed.{url_key}", url, url_key)


def _check_constructed(result: ValidationResult, block: Any) -> None:
    if block is None:
        result.add("constructed", "constructed data is required")
        return
    if not isinstance(block, dict):
        result.add("constructed", "constructed must be an object")
        return
    _check_deck_pair(result, block, "deckId", "externalDeckUrl", required=True)
    # TODO: decide whether 2v2 logs must name the teammate's deck.
    _check_deck_pair(result, block, "teammateDeckId", "teammateExternalDeckUrl", required=False)


def _check_live_draft(result: ValidationResult, block: Any) -> None:
    if block is None:
        result.add("liveDraft", "liveDraft data is required")
        return
    if not isinstance(block, dict):
        result.add("liveDraft", "liveDraft must be an object")
        return

    elements = block.get("elementsPlayed")
    if not isinstance(elements, list):
        result.add("liveDraft.elementsPlayed", "elementsPlayed is required")
    else:
        if not elements:
            result.add("liveDraft.elementsPlayed", "elementsPlayed cannot be empty")
        if len(elements) > len(BASIC_ELEMENTS):
            result.add("liveDraft.elementsPlayed", "elementsPlayed has too many entries")
        _check_elements(
            result, "liveDraft.elementsPlayed", elements, "elementsPlayed has invalid element"
        )

    _check_mvp_cards(result, "liveDraft.mvpCardIds", block.get("mvpCardIds"), "mvpCardIds")


def _check_format_details(
    result: ValidationResult, data: dict, existing: dict, require_all: bool
) -> None:
    constructed = data.get("constructed")
    live_draft = data.get("liveDraft")
    format_given = require_all or _supplied(data, "format")
    fmt = data.get("format") if format_given else None

    if not format_given and (constructed is not None or live_draft is not None):
        result.add("format", "format is required when constructed or liveDraft is provided")

    # A patch that only restates the stored format keeps the stored block.
    same_format = existing.get("format") == fmt

    if fmt == FORMAT_CONSTRUCTED or constructed is not None:
        block = constructed
        if block is None and same_format:
            block = existing.get("constructed")
        _check_constructed(result, block)

    if fmt == FORMAT_LIVE_DRAFT or live_draft is not None:
        block = live_draft
        if block is None and same_format:
            block = existing.get("liveDraft")
        _check_live_draft(result, block)

    if fmt in FORMATS:
        if fmt != FORMAT_CONSTRUCTED and constructed is not None:
            result.add("constructed", "constructed is only valid for constructed format")
        if fmt != FORMAT_LIVE_DRAFT and live_draft is not None:
            result.add("liveDraft", "liveDraft is only valid for live_draft format")


def validate_game_log(
    data: Any,
    require_all: bool = False,
    existing: Optional[dict] = None,
) -> ValidationResult:
    """
    Validate a game log payload.

    Args:
        data: The candidate payload (camelCase wire names).
        require_all: True when creating a log; every required field is checked.
            False for a partial update; only supplied fields (and the fields
            they imply) are checked.
        existing: The stored document a partial update applies to. Used to
            resolve the other half of a cross-field rule the patch touches.

    Returns:
        The collected errors, both flat and keyed by field path.
    """
    result = ValidationResult()
    if not isinstance(data, dict):
        result.add("payload", "game log must be an object")
        return result
    existing = existing or {}

    _check_scalars(result, data, require_all)
    _check_match_type_label(result, data, existing, require_all)
    _check_opponents(result, data)
    _check_format_details(result, data, existing, require_all)

    return result
