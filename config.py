"""Environment configuration for the Game Log Tracker Bot."""

import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")


@dataclass
class Config:
    """Bot configuration loaded from environment variables."""

    discord_token: str
    database_path: str
    min_sample_size: int = 5
    max_ranked: int = 10
    activity_weeks: int = 12

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        token = os.getenv("DISCORD_TOKEN")
        if not token:
            raise ValueError("DISCORD_TOKEN environment variable is required")

        database_path = os.getenv("DATABASE_PATH", "game_logs.db")

        return cls(
            discord_token=token,
            database_path=database_path,
            min_sample_size=_env_int("STATS_MIN_SAMPLE_SIZE", DEFAULT_MIN_SAMPLE_SIZE),
            max_ranked=_env_int("STATS_MAX_RANKED", DEFAULT_MAX_RANKED),
            activity_weeks=_env_int("ACTIVITY_WEEKS", ACTIVITY_WEEKS),
        )


# Game log enums (wire spellings)
OUTCOMES = ["win", "loss", "draw"]
FORMATS = ["constructed", "live_draft"]
MATCH_TYPES = ["1v1", "2v2", "ffa", "custom"]
BASIC_ELEMENTS = ["Fire", "Water", "Earth", "Wood", "Metal"]

FORMAT_CONSTRUCTED = "constructed"
FORMAT_LIVE_DRAFT = "live_draft"
MATCH_TYPE_CUSTOM = "custom"

# Field bounds
TITLE_MIN = 3
TITLE_MAX = 80
DEFAULT_TITLE = "Untitled Game"
MATCH_TYPE_LABEL_MIN = 2
MATCH_TYPE_LABEL_MAX = 40
OPPONENT_NAME_MIN = 2
OPPONENT_NAME_MAX = 40
NOTES_MAX = 1000
DURATION_MAX = 1440
MVP_CARDS_MAX = 3

# Deck links must point at a deck page on one of these hosts
DECK_LINK_HOSTS = {
    "algomancer.cc",
    "www.algomancer.cc",
    "algomancer.gg",
    "www.algomancer.gg",
}

# Stats scopes
SCOPE_MINE = "mine"
SCOPE_COMMUNITY = "community"
SCOPES = [SCOPE_MINE, SCOPE_COMMUNITY]

# Ranking and activity defaults
DEFAULT_MIN_SAMPLE_SIZE = 5
DEFAULT_MAX_RANKED = 10
ACTIVITY_WEEKS = 12

# Embed color (purple themed)
EMBED_COLOR = 0x7B68EE  # Medium slate blue
