"""Utility modules for the Game Log Tracker Bot.

Embed and formatting helpers live in ``utils.helpers`` and are imported from
there, so the game log engine can use this package without discord.py.
"""

# ANSI color codes for console output
class Colors:
    RESET = "\033[0m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"

def log(source: str, message: str, color: str = Colors.WHITE):
    """Print colored log with source tag, e.g. ``[STATS] ...``."""
    print(f"{color}[{source}]{Colors.RESET} {message}")

from utils.dates import isoformat_utc, parse_date_range, to_utc, utc_day
from utils.deck_links import is_valid_deck_link, is_valid_object_id

__all__ = [
    "Colors",
    "log",
    "isoformat_utc",
    "parse_date_range",
    "to_utc",
    "utc_day",
    "is_valid_deck_link",
    "is_valid_object_id",
]
