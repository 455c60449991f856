"""Win rates and ranked leaderboards over stats breakdowns."""

from config import DEFAULT_MAX_RANKED, DEFAULT_MIN_SAMPLE_SIZE
from models import Breakdown, RankedList


def compute_win_rate(wins: int, losses: int) -> float:
    """Win rate as a fraction of decided games. Draws never count."""
    decided = wins + losses
    return wins / decided if decided > 0 else 0.0


def normalize_breakdown(breakdown: Breakdown) -> Breakdown:
    """Return a copy with the win rate recomputed from the counts."""
    return breakdown.copy(win_rate=compute_win_rate(breakdown.wins, breakdown.losses))


def build_ranked_lists(
    breakdowns: list[Breakdown],
    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE,
    max_results: int = DEFAULT_MAX_RANKED,
) -> RankedList:
    """
    Rank breakdowns by play count and by win rate.

    Only breakdowns with at least ``min_sample_size`` games are eligible for
    the win rate list; ties on win rate go to the more played entry.
    """
    normalized = [normalize_breakdown(b) for b in breakdowns]

    most_played = sorted(normalized, key=lambda b: b.total, reverse=True)[:max_results]

    eligible = [b for b in normalized if b.total >= min_sample_size]
    highest_win_rate = sorted(
        eligible, key=lambda b: (b.win_rate, b.total), reverse=True
    )[:max_results]

    return RankedList(
        most_played=most_played,
        highest_win_rate=highest_win_rate,
        min_sample_size=min_sample_size,
    )
