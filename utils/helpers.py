"""Helper utilities for the Game Log Tracker Bot."""

import re
import discord
from typing import Optional

from config import EMBED_COLOR

# Heatmap cells by activity level; future days are blank
HEATMAP_CELLS = ["⬛", "🟫", "🟧", "🟪", "🟩"]
HEATMAP_FUTURE_CELL = "▫️"


def parse_csv_list(text: Optional[str]) -> list[str]:
    """Split comma/space separated input into trimmed, non-empty items."""
    if not text:
        return []
    return [part for part in re.split(r"[\s,]+", text.strip()) if part]


def parse_opponents(text: Optional[str]) -> list[dict]:
    """
    Parse opponent rows from slash command input.

    Rows are separated by ``;`` and the fields of a row by ``|``:
    ``name | elements | deck url | mvp card ids``. Trailing fields may be
    left out, e.g. ``Alice | Fire Water; Bob``.
    """
    opponents = []
    if not text:
        return opponents

    for row in text.split(";"):
        if not row.strip():
            continue
        fields = [f.strip() for f in row.split("|")]
        fields += [""] * (4 - len(fields))
        opponent = {
            "name": fields[0],
            "elements": [e.capitalize() for e in parse_csv_list(fields[1])],
            "mvpCardIds": parse_csv_list(fields[3]),
        }
        if fields[2]:
            opponent["externalDeckUrl"] = fields[2]
        opponents.append(opponent)
    return opponents


def format_win_rate(win_rate: float) -> str:
    """Format a win rate fraction as a percentage string."""
    return f"{win_rate * 100:.1f}%"


def format_duration(minutes: Optional[float]) -> str:
    """Format duration in minutes to human-readable string."""
    if minutes is None:
        return "N/A"
    minutes = int(round(minutes))
    if minutes < 60:
        return f"{minutes}min"
    hours = minutes // 60
    mins = minutes % 60
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}min"


def create_error_embed(title: str, description: str) -> discord.Embed:
    """Create a standardized error embed."""
    return discord.Embed(
        title=f"Error: {title}",
        description=description,
        color=discord.Color.red()
    )


def create_success_embed(title: str, description: str) -> discord.Embed:
    """Create a standardized success embed."""
    return discord.Embed(
        title=title,
        description=description,
        color=discord.Color.green()
    )


def create_info_embed(title: str, description: str = "") -> discord.Embed:
    """Create a standardized info embed."""
    return discord.Embed(
        title=title,
        description=description,
        color=EMBED_COLOR
    )


def truncate_string(text: str, max_length: int = 100) -> str:
    """Truncate string with ellipsis if too long."""
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


def format_record(wins: int, losses: int, draws: int) -> str:
    return f"{wins}W/{losses}L/{draws}D"


def format_breakdown_row(label: str, breakdown) -> str:
    """Format one breakdown as a single line."""
    return (
        f"**{label}** - {format_win_rate(breakdown.win_rate)} "
        f"({format_record(breakdown.wins, breakdown.losses, breakdown.draws)}, "
        f"{breakdown.total}G)"
    )


def format_ranked_rows(breakdowns: list, empty_text: str = "Nothing to rank yet.") -> str:
    """Format a ranked list as numbered lines."""
    if not breakdowns:
        return empty_text
    lines = []
    for rank, breakdown in enumerate(breakdowns, 1):
        lines.append(f"`{rank}.` {format_breakdown_row(breakdown.key, breakdown)}")
    return "\n".join(lines)


def format_validation_errors(field_errors: dict[str, list[str]], max_length: int = 1000) -> str:
    """Format field errors as one line per field path."""
    lines = [
        f"`{path}`: {'; '.join(messages)}"
        for path, messages in field_errors.items()
    ]
    return truncate_string("\n".join(lines), max_length)


def format_game_log_summary(game_log) -> str:
    """Format a game log for display."""
    match_type = game_log.match_type
    if game_log.match_type_label:
        match_type = f"{match_type} ({game_log.match_type_label})"

    opponents = [o.name for o in game_log.opponents if o.name]
    opponents_str = ", ".join(opponents) if opponents else "N/A"

    return (
        f"**{game_log.title}** - {game_log.outcome.upper()}\n"
        f"**Format:** {game_log.format} | **Match:** {match_type} | "
        f"**Duration:** {format_duration(game_log.duration_minutes)}\n"
        f"**Opponents:** {opponents_str}"
    )


def render_activity_grid(days: list) -> str:
    """
    Render an activity window as a weekday-by-week emoji grid.

    Input is the gapless window from ``build_activity_window``; row 0 is
    Monday and each column is one week.
    """
    rows = ["" for _ in range(7)]
    for index, day in enumerate(days):
        cell = HEATMAP_FUTURE_CELL if day.is_future else HEATMAP_CELLS[day.level]
        rows[index % 7] += cell
    labels = ["M", "T", "W", "T", "F", "S", "S"]
    return "\n".join(f"`{label}` {row}" for label, row in zip(labels, rows))
