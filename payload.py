"""Normalization of game log payloads before they are stored."""

from typing import Any, Optional

from config import DEFAULT_TITLE, FORMAT_CONSTRUCTED, FORMAT_LIVE_DRAFT, MATCH_TYPE_CUSTOM
from models import GameLog, Opponent
from utils.dates import to_utc


def _unique_ids(values: list) -> list[str]:
    """Trimmed, non-empty id strings in first-seen order."""
    unique: list[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        value = value.strip()
        if value and value not in unique:
            unique.append(value)
    return unique


def _trimmed(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _to_number(value: Any):
    if isinstance(value, str):
        value = float(value.strip())
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _normalize_opponent(opponent: dict) -> dict:
    normalized: dict[str, Any] = {
        "name": opponent["name"].strip() if isinstance(opponent.get("name"), str) else "",
    }
    user_id = _trimmed(opponent.get("userId"))
    if user_id:
        normalized["userId"] = user_id
    normalized["elements"] = list(opponent.get("elements") or [])
    external = _trimmed(opponent.get("externalDeckUrl"))
    if external:
        normalized["externalDeckUrl"] = external
    normalized["mvpCardIds"] = _unique_ids(opponent.get("mvpCardIds") or [])
    return normalized


def _normalize_constructed(block: dict) -> dict:
    normalized = {}
    for key in ("deckId", "externalDeckUrl", "teammateDeckId", "teammateExternalDeckUrl"):
        value = _trimmed(block.get(key))
        if value:
            normalized[key] = value
    return normalized


def _normalize_live_draft(block: dict) -> dict:
    normalized: dict[str, Any] = {}
    if isinstance(block.get("elementsPlayed"), list):
        normalized["elementsPlayed"] = list(block["elementsPlayed"])
    if isinstance(block.get("mvpCardIds"), list):
        normalized["mvpCardIds"] = _unique_ids(block["mvpCardIds"])
    return normalized


def normalize_game_log_payload(raw: dict) -> dict:
    """
    Clean up a validated payload.

    Only keys present on ``raw`` appear in the result, so the same function
    serves creation and partial updates. Opponent rows with no data at all are
    dropped.
    """
    normalized: dict[str, Any] = {}

    if isinstance(raw.get("title"), str):
        normalized["title"] = raw["title"].strip() or DEFAULT_TITLE

    if raw.get("playedAt") is not None:
        normalized["playedAt"] = to_utc(raw["playedAt"])

    if raw.get("durationMinutes") is not None:
        normalized["durationMinutes"] = _to_number(raw["durationMinutes"])

    for key in ("outcome", "format", "matchType"):
        if raw.get(key):
            normalized[key] = raw[key]

    if isinstance(raw.get("matchTypeLabel"), str):
        normalized["matchTypeLabel"] = raw["matchTypeLabel"].strip()

    for key in ("isPublic", "includeInCommunityStats"):
        if isinstance(raw.get(key), bool):
            normalized[key] = raw[key]

    if isinstance(raw.get("notes"), str):
        normalized["notes"] = raw["notes"].strip()

    if isinstance(raw.get("opponents"), list):
        opponents = [_normalize_opponent(o) for o in raw["opponents"] if isinstance(o, dict)]
        normalized["opponents"] = [
            o for o in opponents if not Opponent.from_document(o).is_empty()
        ]

    if isinstance(raw.get("constructed"), dict):
        normalized["constructed"] = _normalize_constructed(raw["constructed"])

    if isinstance(raw.get("liveDraft"), dict):
        normalized["liveDraft"] = _normalize_live_draft(raw["liveDraft"])

    return normalized


def resolve_community_flag(is_public: bool, include_private_in_community: bool) -> bool:
    """Public logs always count toward community stats; private ones only on opt-in."""
    return bool(is_public or include_private_in_community)


def build_game_log(
    normalized: dict,
    owner_id: str,
    record_id: Optional[int] = None,
    include_private_in_community: bool = False,
) -> GameLog:
    """Materialize a validated, normalized creation payload as a record."""
    document = dict(normalized)
    document["userId"] = owner_id
    document.setdefault("title", DEFAULT_TITLE)
    document.setdefault("isPublic", False)
    document.setdefault(
        "includeInCommunityStats",
        resolve_community_flag(document["isPublic"], include_private_in_community),
    )

    if document.get("matchType") != MATCH_TYPE_CUSTOM:
        document.pop("matchTypeLabel", None)
    if document.get("format") == FORMAT_CONSTRUCTED:
        document.pop("liveDraft", None)
    elif document.get("format") == FORMAT_LIVE_DRAFT:
        document.pop("constructed", None)

    return GameLog.from_document(document, record_id=record_id)
