"""Partial-update diffs for stored game logs."""

from typing import Callable, Optional

from config import FORMAT_CONSTRUCTED, FORMAT_LIVE_DRAFT, MATCH_TYPE_CUSTOM
from models import UpdateDiff

UPDATABLE_FIELDS = [
    "title",
    "playedAt",
    "durationMinutes",
    "outcome",
    "format",
    "matchType",
    "matchTypeLabel",
    "isPublic",
    "includeInCommunityStats",
    "notes",
    "opponents",
    "constructed",
    "liveDraft",
]

# (predicate on the merged document, field that must not survive it)
CASCADE_RULES: list[tuple[Callable[[dict], bool], str]] = [
    (lambda doc: doc.get("matchType") is not None and doc["matchType"] != MATCH_TYPE_CUSTOM,
     "matchTypeLabel"),
    (lambda doc: doc.get("format") == FORMAT_CONSTRUCTED, "liveDraft"),
    (lambda doc: doc.get("format") == FORMAT_LIVE_DRAFT, "constructed"),
]


def build_update(patch: dict, existing: Optional[dict] = None) -> UpdateDiff:
    """
    Build the set/unset diff for a partial update.

    Only fields present on ``patch`` are set. The cascade rules are evaluated
    against ``existing`` merged with the patch, so a stale custom label or an
    inactive format payload is removed whether or not the patch mentions it.
    A field that is unset is never also set.
    """
    diff = UpdateDiff()
    for key in UPDATABLE_FIELDS:
        if patch.get(key) is not None:
            diff.set_fields[key] = patch[key]

    merged = {**(existing or {}), **diff.set_fields}
    for applies, field_name in CASCADE_RULES:
        if applies(merged):
            diff.unset_fields.add(field_name)
            diff.set_fields.pop(field_name, None)

    return diff


def apply_update(document: dict, diff: UpdateDiff) -> dict:
    """Return a copy of ``document`` with the diff applied."""
    updated = dict(document)
    updated.update(diff.set_fields)
    for field_name in diff.unset_fields:
        updated.pop(field_name, None)
    return updated
