"""Gapless daily activity window for the heatmap."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from config import ACTIVITY_WEEKS
from models import ActivityDay, Breakdown
from utils.dates import start_of_week_utc, utc_day


def activity_level(total: int, max_total: int) -> int:
    """Heat level 0-4 relative to the busiest day in the window."""
    if total <= 0:
        return 0
    ratio = total / max(max_total, 1)
    if ratio >= 0.75:
        return 4
    if ratio >= 0.5:
        return 3
    if ratio >= 0.25:
        return 2
    return 1


def build_activity_window(
    by_day: list[Breakdown],
    weeks: int = ACTIVITY_WEEKS,
    reference_date: Optional[datetime] = None,
) -> list[ActivityDay]:
    """
    Lay daily totals out over ``weeks`` full Monday-to-Sunday UTC weeks.

    The window ends with the week containing ``reference_date`` (now by
    default). Days with no games report 0; days after the reference date are
    flagged as future so they can be drawn differently from idle days.
    """
    if weeks < 1:
        raise ValueError("weeks must be at least 1")
    if reference_date is None:
        reference_date = datetime.now(timezone.utc)

    today = utc_day(reference_date)
    start = start_of_week_utc(today) - timedelta(weeks=weeks - 1)

    totals: dict = {}
    for breakdown in by_day:
        day = utc_day(breakdown.key)
        totals[day] = totals.get(day, 0) + breakdown.total

    days = [start + timedelta(days=offset) for offset in range(weeks * 7)]
    max_total = max((totals.get(day, 0) for day in days if day <= today), default=0)

    return [
        ActivityDay(
            date=day,
            total=totals.get(day, 0),
            level=activity_level(totals.get(day, 0), max_total),
            is_future=day > today,
        )
        for day in days
    ]
