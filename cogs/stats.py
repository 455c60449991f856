"""Statistics cog for the Game Log Tracker Bot."""

import discord
from discord import app_commands
from discord.ext import commands
from typing import Optional

from aggregation import OwnerRequiredError, aggregate_game_logs, build_stats_report
from config import SCOPE_COMMUNITY, SCOPE_MINE
from models import StatsReport
from utils import Colors, log
from utils.dates import parse_date_range
from utils.helpers import (
    create_error_embed,
    create_info_embed,
    format_breakdown_row,
    format_duration,
    format_ranked_rows,
    format_record,
    format_win_rate,
    render_activity_grid,
)

SCOPE_CHOICES = [
    app_commands.Choice(name="My logs", value=SCOPE_MINE),
    app_commands.Choice(name="Community", value=SCOPE_COMMUNITY),
]


class Stats(commands.Cog):
    """Cog for viewing statistics."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    async def _load_report(
        self,
        interaction: discord.Interaction,
        scope: str,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> Optional[StatsReport]:
        """Build the stats report, replying with an error embed on bad input."""
        try:
            start, end = parse_date_range(date_from, date_to)
        except ValueError as e:
            await interaction.response.send_message(
                embed=create_error_embed("Invalid Date Range", str(e)),
                ephemeral=True
            )
            return None

        owner_id = str(interaction.user.id) if interaction.user else None
        db = self.bot.db
        config = self.bot.config
        try:
            records = await db.fetch_stats_records(scope, owner_id, start, end)
            facets = aggregate_game_logs(records, scope, owner_id, start, end)
        except OwnerRequiredError:
            log("STATS", "  ERROR: personal stats requested without a user", Colors.RED)
            await interaction.response.send_message(
                embed=create_error_embed(
                    "Unknown Player",
                    "Personal stats need to know who is asking."
                ),
                ephemeral=True
            )
            return None

        return build_stats_report(
            facets,
            scope,
            start,
            end,
            min_sample_size=config.min_sample_size,
            max_results=config.max_ranked,
            weeks=config.activity_weeks,
        )

    @app_commands.command(name="stats", description="View game log statistics")
    @app_commands.describe(
        scope="Your own logs or the community's",
        date_from="Start date (YYYY-MM-DD, UTC)",
        date_to="End date (YYYY-MM-DD, UTC)",
    )
    @app_commands.choices(scope=SCOPE_CHOICES)
    async def stats(
        self,
        interaction: discord.Interaction,
        scope: Optional[app_commands.Choice[str]] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> None:
        """Display summary, breakdowns and leaderboards."""
        scope_value = scope.value if scope else SCOPE_MINE
        log("STATS", f"stats command invoked by {interaction.user} (scope={scope_value})", Colors.CYAN)

        report = await self._load_report(interaction, scope_value, date_from, date_to)
        if report is None:
            return

        title = "Your Stats" if scope_value == SCOPE_MINE else "Community Stats"
        if report.summary.total == 0:
            await interaction.response.send_message(
                embed=create_info_embed(title, "No game logs match this query yet!")
            )
            return

        summary = report.summary
        embed = create_info_embed(title)
        embed.add_field(
            name="Overview",
            value=(
                f"**Games:** {summary.total}\n"
                f"**Record:** {format_record(summary.wins, summary.losses, summary.draws)}\n"
                f"**Win Rate:** {format_win_rate(summary.win_rate)}\n"
                f"**Avg Duration:** {format_duration(summary.avg_duration_minutes)}"
            ),
            inline=False
        )
        embed.add_field(
            name="By Format",
            value="\n".join(format_breakdown_row(b.key, b) for b in report.by_format),
            inline=True
        )
        embed.add_field(
            name="By Match Type",
            value="\n".join(format_breakdown_row(b.key, b) for b in report.by_match_type),
            inline=True
        )
        embed.add_field(
            name="Elements (live draft)",
            value="\n".join(format_breakdown_row(b.key, b) for b in report.elements),
            inline=False
        )
        embed.add_field(
            name="Most Played MVP Cards",
            value=format_ranked_rows(report.mvp_cards.most_played),
            inline=True
        )
        embed.add_field(
            name=f"Best MVP Cards (min {report.mvp_cards.min_sample_size} games)",
            value=format_ranked_rows(report.mvp_cards.highest_win_rate),
            inline=True
        )
        embed.add_field(
            name="Most Played Decks",
            value=format_ranked_rows(report.decks.most_played),
            inline=False
        )
        embed.add_field(
            name=f"Best Decks (min {report.decks.min_sample_size} games)",
            value=format_ranked_rows(report.decks.highest_win_rate),
            inline=False
        )
        embed.set_footer(text="Win rate counts wins and losses only; draws are excluded.")

        await interaction.response.send_message(embed=embed)

    @app_commands.command(name="activity", description="View the daily activity heatmap")
    @app_commands.describe(scope="Your own logs or the community's")
    @app_commands.choices(scope=SCOPE_CHOICES)
    async def activity(
        self,
        interaction: discord.Interaction,
        scope: Optional[app_commands.Choice[str]] = None,
    ) -> None:
        """Display games per day over the last few weeks."""
        scope_value = scope.value if scope else SCOPE_MINE
        log("STATS", f"activity command invoked by {interaction.user} (scope={scope_value})", Colors.CYAN)

        report = await self._load_report(interaction, scope_value)
        if report is None:
            return

        weeks = len(report.activity) // 7
        games = sum(day.total for day in report.activity)
        active_days = sum(1 for day in report.activity if day.total > 0)

        embed = create_info_embed(f"Activity - last {weeks} weeks")
        embed.description = render_activity_grid(report.activity)
        embed.set_footer(text=f"{games} game(s) on {active_days} day(s) | UTC days, Monday first")

        await interaction.response.send_message(embed=embed)


async def setup(bot: commands.Bot) -> None:
    """Set up the stats cog."""
    await bot.add_cog(Stats(bot))
