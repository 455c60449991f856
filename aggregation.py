"""Stats aggregation over game logs.

Every facet is reduced from the same filtered list of records, so all
breakdowns in one result describe exactly the same snapshot.
"""

from datetime import datetime
from typing import Callable, Iterable, Optional

from activity import build_activity_window
from config import (
    ACTIVITY_WEEKS,
    BASIC_ELEMENTS,
    DEFAULT_MAX_RANKED,
    DEFAULT_MIN_SAMPLE_SIZE,
    FORMATS,
    MATCH_TYPES,
    SCOPE_COMMUNITY,
    SCOPE_MINE,
)
from models import (
    Breakdown,
    ConstructedDetails,
    GameLog,
    LiveDraftDetails,
    StatsFacets,
    StatsReport,
    Summary,
)
from ranking import build_ranked_lists, compute_win_rate, normalize_breakdown
from utils import Colors, log
from utils.dates import to_utc, utc_day


class OwnerRequiredError(ValueError):
    """Personal stats were requested without knowing whose logs to read."""


def _in_scope(record: GameLog, scope: str, owner_id: Optional[str]) -> bool:
    if scope == SCOPE_MINE:
        return record.owner_id == owner_id
    return record.is_public or record.include_in_community_stats


def filter_game_logs(
    records: Iterable[GameLog],
    scope: str,
    owner_id: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> list[GameLog]:
    """
    Select the records a stats query covers.

    Raises:
        OwnerRequiredError: If scope is "mine" and no owner is given.
        ValueError: If the scope is unknown.
    """
    if scope not in (SCOPE_MINE, SCOPE_COMMUNITY):
        raise ValueError(f"Invalid scope: {scope!r}")
    if scope == SCOPE_MINE and not owner_id:
        raise OwnerRequiredError("owner_id is required for personal stats")

    start = to_utc(date_from) if date_from else None
    end = to_utc(date_to) if date_to else None

    selected = []
    for record in records:
        if not _in_scope(record, scope, owner_id):
            continue
        played_at = to_utc(record.played_at)
        if start and played_at < start:
            continue
        if end and played_at > end:
            continue
        selected.append(record)
    return selected


def record_mvp_card_ids(record: GameLog) -> list[str]:
    """The player's own MVP cards plus every opponent's, each card once."""
    card_ids: list[str] = []
    own = record.details.mvp_card_ids if isinstance(record.details, LiveDraftDetails) else []
    for card_id in own:
        if card_id not in card_ids:
            card_ids.append(card_id)
    for opponent in record.opponents:
        for card_id in opponent.mvp_card_ids:
            if card_id not in card_ids:
                card_ids.append(card_id)
    return card_ids


def _record_elements(record: GameLog) -> list[str]:
    if not isinstance(record.details, LiveDraftDetails):
        return []
    elements: list[str] = []
    for element in record.details.elements_played:
        if element not in elements:
            elements.append(element)
    return elements


def _record_deck(record: GameLog) -> list[str]:
    if isinstance(record.details, ConstructedDetails) and record.details.deck_id:
        return [record.details.deck_id]
    return []


def group_breakdowns(
    records: Iterable[GameLog], keys_for: Callable[[GameLog], Iterable[str]]
) -> list[Breakdown]:
    """Count outcomes per key; a record contributes once to each key it yields."""
    buckets: dict[str, Breakdown] = {}
    for record in records:
        for key in keys_for(record):
            if key not in buckets:
                buckets[key] = Breakdown(key=key)
            buckets[key].count(record.outcome)
    return [normalize_breakdown(b) for b in buckets.values()]


def summarize(records: list[GameLog]) -> Summary:
    summary = Summary()
    duration_total = 0.0
    for record in records:
        summary.total += 1
        if record.outcome == "win":
            summary.wins += 1
        elif record.outcome == "loss":
            summary.losses += 1
        elif record.outcome == "draw":
            summary.draws += 1
        duration_total += record.duration_minutes or 0
    summary.win_rate = compute_win_rate(summary.wins, summary.losses)
    summary.avg_duration_minutes = duration_total / summary.total if summary.total else 0.0
    return summary


def _by_total(breakdowns: list[Breakdown]) -> list[Breakdown]:
    return sorted(breakdowns, key=lambda b: b.total, reverse=True)


def aggregate_game_logs(
    records: Iterable[GameLog],
    scope: str,
    owner_id: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> StatsFacets:
    """Compute every stats facet for one scope and optional inclusive date range."""
    records = list(records)
    selected = filter_game_logs(records, scope, owner_id, date_from, date_to)
    log("STATS", f"aggregate scope={scope} matched {len(selected)} of {len(records)} logs", Colors.CYAN)

    return StatsFacets(
        summary=summarize(selected),
        by_format=sorted(group_breakdowns(selected, lambda r: [r.format]), key=lambda b: b.key),
        by_match_type=sorted(
            group_breakdowns(selected, lambda r: [r.match_type]), key=lambda b: b.key
        ),
        by_day=sorted(
            group_breakdowns(selected, lambda r: [utc_day(r.played_at).isoformat()]),
            key=lambda b: b.key,
        ),
        by_element=_by_total(group_breakdowns(selected, _record_elements)),
        by_mvp_card=_by_total(group_breakdowns(selected, record_mvp_card_ids)),
        by_deck=_by_total(group_breakdowns(selected, _record_deck)),
    )


def _fill_keys(breakdowns: list[Breakdown], keys: list[str]) -> list[Breakdown]:
    """One breakdown per known key, zeroed where the facet had no records."""
    found = {b.key: b for b in breakdowns}
    return [found.get(key) or Breakdown(key=key) for key in keys]


def build_stats_report(
    facets: StatsFacets,
    scope: str,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE,
    max_results: int = DEFAULT_MAX_RANKED,
    weeks: int = ACTIVITY_WEEKS,
    reference_date: Optional[datetime] = None,
) -> StatsReport:
    """Shape aggregated facets into the stats response.

    Card and deck ids in the ranked lists are left as-is; resolving them to
    names is up to the caller.
    """
    return StatsReport(
        scope=scope,
        date_from=date_from,
        date_to=date_to,
        summary=facets.summary,
        by_format=_fill_keys(facets.by_format, FORMATS),
        by_match_type=_fill_keys(facets.by_match_type, MATCH_TYPES),
        time_series=list(facets.by_day),
        elements=_fill_keys(facets.by_element, BASIC_ELEMENTS),
        mvp_cards=build_ranked_lists(facets.by_mvp_card, min_sample_size, max_results),
        decks=build_ranked_lists(facets.by_deck, min_sample_size, max_results),
        activity=build_activity_window(facets.by_day, weeks, reference_date),
    )
