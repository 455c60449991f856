"""Game logging cog for the Game Log Tracker Bot."""

import math
import discord
from discord import app_commands
from discord.ext import commands
from typing import Optional

from config import FORMAT_CONSTRUCTED, FORMAT_LIVE_DRAFT
from payload import build_game_log, normalize_game_log_payload, resolve_community_flag
from updates import build_update
from utils import Colors, log
from utils.helpers import (
    create_error_embed,
    create_info_embed,
    create_success_embed,
    format_game_log_summary,
    format_validation_errors,
    parse_csv_list,
    parse_opponents,
)
from validation import validate_game_log

PAGE_SIZE = 5

OUTCOME_CHOICES = [
    app_commands.Choice(name="Win", value="win"),
    app_commands.Choice(name="Loss", value="loss"),
    app_commands.Choice(name="Draw", value="draw"),
]

FORMAT_CHOICES = [
    app_commands.Choice(name="Constructed", value=FORMAT_CONSTRUCTED),
    app_commands.Choice(name="Live Draft", value=FORMAT_LIVE_DRAFT),
]

MATCH_TYPE_CHOICES = [
    app_commands.Choice(name="1v1", value="1v1"),
    app_commands.Choice(name="2v2", value="2v2"),
    app_commands.Choice(name="Free-for-all", value="ffa"),
    app_commands.Choice(name="Custom", value="custom"),
]


def _deck_reference(value: str, id_key: str, url_key: str) -> dict:
    """A deck given on the command line is either a link or an internal id."""
    value = value.strip()
    if value.lower().startswith(("http://", "https://")):
        return {url_key: value}
    return {id_key: value}


def build_log_payload(
    *,
    outcome: Optional[str] = None,
    format: Optional[str] = None,
    match_type: Optional[str] = None,
    title: Optional[str] = None,
    match_label: Optional[str] = None,
    played_at: Optional[str] = None,
    duration: Optional[float] = None,
    deck: Optional[str] = None,
    teammate_deck: Optional[str] = None,
    elements: Optional[str] = None,
    mvp_cards: Optional[str] = None,
    opponents: Optional[str] = None,
    notes: Optional[str] = None,
    public: Optional[bool] = None,
) -> dict:
    """Turn slash command options into a wire payload.

    Options left out are left out of the payload, so the result works both
    for a new log and for a partial edit.
    """
    payload = {}
    if title is not None:
        payload["title"] = title
    if outcome is not None:
        payload["outcome"] = outcome
    if format is not None:
        payload["format"] = format
    if match_type is not None:
        payload["matchType"] = match_type
    if match_label is not None:
        payload["matchTypeLabel"] = match_label
    if played_at is not None:
        payload["playedAt"] = played_at
    if duration is not None:
        payload["durationMinutes"] = duration
    if notes is not None:
        payload["notes"] = notes
    if public is not None:
        payload["isPublic"] = public
    if opponents is not None:
        payload["opponents"] = parse_opponents(opponents)

    if deck or teammate_deck:
        constructed = {}
        if deck:
            constructed.update(_deck_reference(deck, "deckId", "externalDeckUrl"))
        if teammate_deck:
            constructed.update(
                _deck_reference(teammate_deck, "teammateDeckId", "teammateExternalDeckUrl")
            )
        payload["constructed"] = constructed

    if elements or mvp_cards:
        live_draft = {}
        if elements:
            live_draft["elementsPlayed"] = [e.capitalize() for e in parse_csv_list(elements)]
        if mvp_cards:
            live_draft["mvpCardIds"] = parse_csv_list(mvp_cards)
        payload["liveDraft"] = live_draft

    return payload


class GameLogging(commands.Cog):
    """Cog for logging, editing and listing game logs."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    async def _reject(self, interaction: discord.Interaction, title: str, description: str) -> None:
        await interaction.response.send_message(
            embed=create_error_embed(title, description),
            ephemeral=True
        )

    async def _get_owned_log(self, interaction: discord.Interaction, log_id: int):
        """Fetch a log the invoking user owns, replying with an error otherwise."""
        game_log = await self.bot.db.get_game_log(log_id)
        if not game_log:
            await self._reject(interaction, "Not Found", f"Game log #{log_id} does not exist.")
            return None
        if game_log.owner_id != str(interaction.user.id):
            log("GAME_LOG", f"  {interaction.user} tried to modify log #{log_id} owned by {game_log.owner_id}", Colors.RED)
            await self._reject(interaction, "Not Allowed", "You can only change your own game logs.")
            return None
        return game_log

    @app_commands.command(name="log", description="Log a played match")
    @app_commands.describe(
        outcome="How the match ended for you",
        format="Constructed or live draft",
        match_type="1v1, 2v2, free-for-all or custom",
        title="Short title (defaults to 'Untitled Game')",
        match_label="Name of the match type (required for custom)",
        played_at="When it was played, e.g. 2026-10-18 or 2026-10-18T20:30 (UTC, defaults to now)",
        duration="Duration in minutes",
        deck="Constructed: your deck id or deck link",
        teammate_deck="Constructed 2v2: your teammate's deck id or deck link",
        elements="Live draft: elements you played, e.g. 'Fire Water'",
        mvp_cards="Live draft: up to 3 MVP card ids",
        opponents="Opponents as 'name | elements | deck link | mvp ids', separated by ';'",
        notes="Notes about the match",
        public="Show this log publicly",
    )
    @app_commands.choices(outcome=OUTCOME_CHOICES, format=FORMAT_CHOICES, match_type=MATCH_TYPE_CHOICES)
    async def log_game(
        self,
        interaction: discord.Interaction,
        outcome: app_commands.Choice[str],
        format: app_commands.Choice[str],
        match_type: app_commands.Choice[str],
        title: Optional[str] = None,
        match_label: Optional[str] = None,
        played_at: Optional[str] = None,
        duration: float = 0.0,
        deck: Optional[str] = None,
        teammate_deck: Optional[str] = None,
        elements: Optional[str] = None,
        mvp_cards: Optional[str] = None,
        opponents: Optional[str] = None,
        notes: Optional[str] = None,
        public: bool = False,
    ) -> None:
        """Validate and store a new game log."""
        log("GAME_LOG", f"log command invoked by {interaction.user}", Colors.MAGENTA)

        payload = build_log_payload(
            outcome=outcome.value,
            format=format.value,
            match_type=match_type.value,
            title=title,
            match_label=match_label,
            played_at=played_at or discord.utils.utcnow().isoformat(),
            duration=duration,
            deck=deck,
            teammate_deck=teammate_deck,
            elements=elements,
            mvp_cards=mvp_cards,
            opponents=opponents or "",
            notes=notes,
            public=public,
        )
        log("GAME_LOG", f"  payload: {payload}", Colors.MAGENTA)

        validation = validate_game_log(payload, require_all=True)
        if not validation.is_valid:
            log("GAME_LOG", f"  ERROR: validation failed: {validation.errors}", Colors.RED)
            await self._reject(
                interaction,
                "Invalid Game Log",
                format_validation_errors(validation.field_errors)
            )
            return

        db = self.bot.db
        player = await db.get_or_create_player(str(interaction.user.id), interaction.user.display_name)
        game_log = build_game_log(
            normalize_game_log_payload(payload),
            owner_id=player.discord_id,
            include_private_in_community=player.include_private_in_community,
        )
        created = await db.create_game_log(game_log)
        log("GAME_LOG", f"  Created game log #{created.id}", Colors.GREEN)

        await interaction.response.send_message(
            embed=create_success_embed(
                f"Game Log #{created.id} Saved!",
                format_game_log_summary(created)
            )
        )

    @app_commands.command(name="editlog", description="Change fields of one of your game logs")
    @app_commands.describe(
        log_id="ID of the game log",
        outcome="How the match ended for you",
        format="Constructed or live draft (switching also needs the new deck or elements)",
        match_type="1v1, 2v2, free-for-all or custom",
        title="New title",
        match_label="Name of the match type (required for custom)",
        played_at="When it was played (UTC)",
        duration="Duration in minutes",
        deck="Constructed: your deck id or deck link",
        teammate_deck="Constructed 2v2: your teammate's deck id or deck link",
        elements="Live draft: elements you played",
        mvp_cards="Live draft: up to 3 MVP card ids",
        opponents="Replace opponents: 'name | elements | deck link | mvp ids', separated by ';'",
        notes="New notes",
        public="Show this log publicly",
    )
    @app_commands.choices(outcome=OUTCOME_CHOICES, format=FORMAT_CHOICES, match_type=MATCH_TYPE_CHOICES)
    async def edit_log(
        self,
        interaction: discord.Interaction,
        log_id: int,
        outcome: Optional[app_commands.Choice[str]] = None,
        format: Optional[app_commands.Choice[str]] = None,
        match_type: Optional[app_commands.Choice[str]] = None,
        title: Optional[str] = None,
        match_label: Optional[str] = None,
        played_at: Optional[str] = None,
        duration: Optional[float] = None,
        deck: Optional[str] = None,
        teammate_deck: Optional[str] = None,
        elements: Optional[str] = None,
        mvp_cards: Optional[str] = None,
        opponents: Optional[str] = None,
        notes: Optional[str] = None,
        public: Optional[bool] = None,
    ) -> None:
        """Apply a partial update to a game log."""
        log("GAME_LOG", f"editlog #{log_id} invoked by {interaction.user}", Colors.MAGENTA)

        existing = await self._get_owned_log(interaction, log_id)
        if not existing:
            return

        patch = build_log_payload(
            outcome=outcome.value if outcome else None,
            format=format.value if format else None,
            match_type=match_type.value if match_type else None,
            title=title,
            match_label=match_label,
            played_at=played_at,
            duration=duration,
            deck=deck,
            teammate_deck=teammate_deck,
            elements=elements,
            mvp_cards=mvp_cards,
            opponents=opponents,
            notes=notes,
            public=public,
        )
        if not patch:
            await self._reject(interaction, "Nothing To Update", "Pass at least one field to change.")
            return

        # Details without a format refer to the format already stored
        if ("constructed" in patch or "liveDraft" in patch) and "format" not in patch:
            patch["format"] = existing.format

        existing_document = existing.to_document()
        validation = validate_game_log(patch, require_all=False, existing=existing_document)
        if not validation.is_valid:
            log("GAME_LOG", f"  ERROR: validation failed: {validation.errors}", Colors.RED)
            await self._reject(
                interaction,
                "Invalid Update",
                format_validation_errors(validation.field_errors)
            )
            return

        db = self.bot.db
        normalized = normalize_game_log_payload(patch)
        if "isPublic" in normalized:
            player = await db.get_or_create_player(str(interaction.user.id), interaction.user.display_name)
            normalized["includeInCommunityStats"] = resolve_community_flag(
                normalized["isPublic"], player.include_private_in_community
            )

        diff = build_update(normalized, existing_document)
        log("GAME_LOG", f"  diff set={sorted(diff.set_fields)} unset={sorted(diff.unset_fields)}", Colors.MAGENTA)
        updated = await db.update_game_log(log_id, diff)

        await interaction.response.send_message(
            embed=create_success_embed(
                f"Game Log #{log_id} Updated",
                format_game_log_summary(updated)
            )
        )

    @app_commands.command(name="deletelog", description="Delete one of your game logs")
    @app_commands.describe(log_id="ID of the game log")
    async def delete_log(self, interaction: discord.Interaction, log_id: int) -> None:
        """Delete a game log owned by the invoking user."""
        log("GAME_LOG", f"deletelog #{log_id} invoked by {interaction.user}", Colors.MAGENTA)

        existing = await self._get_owned_log(interaction, log_id)
        if not existing:
            return

        if not await self.bot.db.delete_game_log(log_id):
            await self._reject(interaction, "Delete Failed", f"Game log #{log_id} could not be deleted.")
            return

        await interaction.response.send_message(
            embed=create_success_embed("Game Log Deleted", f"Game log #{log_id} was deleted."),
            ephemeral=True
        )

    @app_commands.command(name="mylogs", description="List your game logs")
    @app_commands.describe(
        page="Page number (default 1)",
        format="Only show this format",
        outcome="Only show this outcome",
    )
    @app_commands.choices(format=FORMAT_CHOICES, outcome=OUTCOME_CHOICES)
    async def my_logs(
        self,
        interaction: discord.Interaction,
        page: int = 1,
        format: Optional[app_commands.Choice[str]] = None,
        outcome: Optional[app_commands.Choice[str]] = None,
    ) -> None:
        """Display a page of the invoking user's game logs, newest first."""
        db = self.bot.db
        owner_id = str(interaction.user.id)
        format_value = format.value if format else None
        outcome_value = outcome.value if outcome else None

        total = await db.count_user_game_logs(owner_id, format_value, outcome_value)
        if total == 0:
            await interaction.response.send_message(
                embed=create_info_embed("Your Game Logs", "You haven't logged any games yet!"),
                ephemeral=True
            )
            return

        total_pages = max(1, math.ceil(total / PAGE_SIZE))
        page = max(1, min(page, total_pages))
        logs = await db.list_user_game_logs(
            owner_id,
            format=format_value,
            outcome=outcome_value,
            limit=PAGE_SIZE,
            offset=(page - 1) * PAGE_SIZE
        )

        embed = create_info_embed(f"Your Game Logs (page {page}/{total_pages})")
        for game_log in logs:
            embed.add_field(
                name=f"#{game_log.id} - {game_log.played_at.strftime('%m/%d/%Y')}",
                value=format_game_log_summary(game_log),
                inline=False
            )
        embed.set_footer(text=f"{total} log(s) total")

        await interaction.response.send_message(embed=embed, ephemeral=True)

    @app_commands.command(name="communitystats", description="Choose whether your private logs count toward community stats")
    @app_commands.describe(include="Count your private logs in community stats")
    async def community_stats(self, interaction: discord.Interaction, include: bool) -> None:
        """Toggle the private-log opt-in for community stats."""
        db = self.bot.db
        player = await db.get_or_create_player(str(interaction.user.id), interaction.user.display_name)
        changed = await db.set_community_preference(player.discord_id, include)

        state = "now count" if include else "no longer count"
        await interaction.response.send_message(
            embed=create_success_embed(
                "Community Stats",
                f"Your private logs {state} toward community stats ({changed} log(s) updated)."
            ),
            ephemeral=True
        )


async def setup(bot: commands.Bot) -> None:
    """Set up the game logging cog."""
    await bot.add_cog(GameLogging(bot))
