"""Main bot entry point for the Game Log Tracker."""

import asyncio
import logging
from dotenv import load_dotenv
load_dotenv()

import discord
from discord import app_commands
from discord.ext import commands

from config import Config, EMBED_COLOR
from database import Database
from utils import Colors, log
from utils.helpers import create_error_embed

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("game-log-bot")


class GameLogBot(commands.Bot):
    """Game Log Tracker Discord Bot."""

    def __init__(self, config: Config):
        intents = discord.Intents.default()

        super().__init__(
            command_prefix="!",
            intents=intents,
            help_command=None
        )

        self.config = config
        self.db = Database(config.database_path)

    async def setup_hook(self) -> None:
        """Called when the bot is starting up."""
        log("BOT", "setup_hook starting...", Colors.GREEN)
        # Connect to database
        await self.db.connect()
        log("BOT", "Database connected", Colors.GREEN)

        # Load cogs
        await self.load_extension("cogs.game_logging")
        log("BOT", "  Loaded cogs.game_logging", Colors.GREEN)
        await self.load_extension("cogs.stats")
        log("BOT", "  Loaded cogs.stats", Colors.GREEN)

        self.tree.on_error = self.on_app_command_error

        # Sync commands
        log("BOT", "Syncing commands...", Colors.GREEN)
        await self.tree.sync()
        log("BOT", "Commands synced!", Colors.GREEN)

    async def on_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError
    ) -> None:
        """Report a failed slash command to the user instead of leaving it hanging."""
        command = interaction.command.name if interaction.command else "?"
        log("BOT", f"ERROR in /{command}: {error}", Colors.RED)
        logger.exception("Slash command /%s failed", command, exc_info=error)

        embed = create_error_embed("Something Went Wrong", "The command failed. Please try again.")
        try:
            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException as e:
            log("BOT", f"  Could not send error message: {e}", Colors.RED)

    async def on_ready(self) -> None:
        """Called when the bot is ready."""
        log("BOT", f"Logged in as {self.user} (ID: {self.user.id})", Colors.GREEN)
        log("BOT", f"Connected to {len(self.guilds)} guild(s)", Colors.GREEN)
        for guild in self.guilds:
            log("BOT", f"  - {guild.name} (ID: {guild.id})", Colors.GREEN)

    async def close(self) -> None:
        """Clean up on shutdown."""
        await self.db.close()
        await super().close()


@app_commands.command(name="help", description="Get help with Game Log Tracker commands")
async def help_command(interaction: discord.Interaction) -> None:
    """Display help information about all commands."""
    embed = discord.Embed(
        title="Game Log Tracker - Help",
        description="Log your matches and see how your decks and drafts perform!",
        color=EMBED_COLOR
    )

    embed.add_field(
        name="Game Logs",
        value=(
            "**/log** - Log a played match\n"
            "**/editlog** `log_id` - Change fields of one of your logs\n"
            "**/deletelog** `log_id` - Delete one of your logs\n"
            "**/mylogs** `[page]` - List your logs\n"
            "**/communitystats** `include` - Count private logs in community stats"
        ),
        inline=False
    )

    embed.add_field(
        name="Statistics",
        value=(
            "**/stats** `[scope]` `[date_from]` `[date_to]` - Win rates, breakdowns and leaderboards\n"
            "**/activity** `[scope]` - Daily activity heatmap"
        ),
        inline=False
    )

    embed.add_field(
        name="Win Rate",
        value=(
            "Win rate is wins / (wins + losses). Draws are not counted.\n"
            "Leaderboards by win rate need a minimum number of games."
        ),
        inline=False
    )

    await interaction.response.send_message(embed=embed)


async def main() -> None:
    """Main entry point."""
    config = Config.from_env()
    bot = GameLogBot(config)

    # Add help command to tree
    bot.tree.add_command(help_command)

    async with bot:
        await bot.start(config.discord_token)


if __name__ == "__main__":
    asyncio.run(main())
