"""Tests for win rates and ranked lists."""

import pytest

from models import Breakdown
from ranking import build_ranked_lists, compute_win_rate, normalize_breakdown


@pytest.mark.parametrize(
    "wins, losses, expected",
    [(0, 0, 0.0), (3, 1, 0.75), (0, 4, 0.0), (5, 0, 1.0)],
)
def test_compute_win_rate(wins, losses, expected):
    assert compute_win_rate(wins, losses) == expected


def test_draws_do_not_change_win_rate():
    breakdown = Breakdown(key="x", total=10, wins=3, losses=1, draws=6)
    assert normalize_breakdown(breakdown).win_rate == 0.75


def test_normalize_breakdown_returns_a_copy():
    breakdown = Breakdown(key="x", total=2, wins=1, losses=1, win_rate=0.9)
    normalized = normalize_breakdown(breakdown)
    assert normalized.win_rate == 0.5
    assert breakdown.win_rate == 0.9


def _ranking_items():
    return [
        Breakdown(key="a", total=10, wins=8, losses=2),
        Breakdown(key="b", total=4, wins=4, losses=0),
        Breakdown(key="c", total=12, wins=6, losses=6),
    ]


def test_most_played_orders_by_total():
    ranked = build_ranked_lists(_ranking_items(), min_sample_size=5)
    assert [b.key for b in ranked.most_played] == ["c", "a", "b"]


def test_highest_win_rate_requires_sample_size():
    ranked = build_ranked_lists(_ranking_items(), min_sample_size=5)
    assert [b.key for b in ranked.highest_win_rate] == ["a", "c"]
    assert [b.win_rate for b in ranked.highest_win_rate] == [0.8, 0.5]
    assert ranked.min_sample_size == 5


def test_win_rate_ties_go_to_more_played():
    items = [
        Breakdown(key="small", total=6, wins=3, losses=3),
        Breakdown(key="big", total=20, wins=10, losses=10),
    ]
    ranked = build_ranked_lists(items, min_sample_size=5)
    assert [b.key for b in ranked.highest_win_rate] == ["big", "small"]


def test_most_played_keeps_input_order_on_ties():
    items = [Breakdown(key=k, total=3, wins=1, losses=2) for k in ("first", "second", "third")]
    ranked = build_ranked_lists(items)
    assert [b.key for b in ranked.most_played] == ["first", "second", "third"]


def test_lists_are_truncated():
    items = [Breakdown(key=str(i), total=i, wins=i, losses=0) for i in range(1, 16)]
    ranked = build_ranked_lists(items, min_sample_size=1, max_results=3)
    assert [b.key for b in ranked.most_played] == ["15", "14", "13"]
    assert len(ranked.highest_win_rate) == 3


def test_empty_input():
    ranked = build_ranked_lists([])
    assert ranked.most_played == []
    assert ranked.highest_win_rate == []


def test_to_dict_names_the_key():
    ranked = build_ranked_lists(_ranking_items(), min_sample_size=5)
    data = ranked.to_dict("cardId")
    assert data["minSampleSize"] == 5
    assert data["mostPlayed"][0] == {
        "cardId": "c", "total": 12, "wins": 6, "losses": 6, "draws": 0, "winRate": 0.5,
    }
