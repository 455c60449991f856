"""Database setup and async helpers for the Game Log Tracker Bot."""

import json
import aiosqlite
from datetime import datetime
from typing import Optional

from aggregation import OwnerRequiredError
from config import SCOPE_MINE, SCOPES
from models import GameLog, Player, UpdateDiff
from payload import resolve_community_flag
from updates import apply_update
from utils import Colors, log
from utils.dates import isoformat_utc


def _json_default(value):
    if isinstance(value, datetime):
        return isoformat_utc(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_document(document: dict) -> str:
    return json.dumps(document, default=_json_default)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class Database:
    """Async SQLite database manager."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def connect(self) -> None:
        """Establish database connection and initialize schema."""
        self._connection = await aiosqlite.connect(self.db_path)
        self._connection.row_factory = aiosqlite.Row
        await self._create_tables()

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    @property
    def conn(self) -> aiosqlite.Connection:
        """Get the active connection."""
        if not self._connection:
            raise RuntimeError("Database not connected")
        return self._connection

    async def _create_tables(self) -> None:
        """Create database tables if they don't exist.

        The full log lives in ``document`` as the wire JSON; the other
        game_logs columns copy the fields stats queries filter on.
        """
        await self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS players (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                discord_id TEXT UNIQUE NOT NULL,
                username TEXT NOT NULL,
                include_private_in_community INTEGER NOT NULL DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS game_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                owner_id TEXT NOT NULL,
                played_at TEXT NOT NULL,
                format TEXT NOT NULL CHECK (format IN ('constructed', 'live_draft')),
                outcome TEXT NOT NULL CHECK (outcome IN ('win', 'loss', 'draw')),
                is_public INTEGER NOT NULL DEFAULT 0,
                include_in_community_stats INTEGER NOT NULL DEFAULT 0,
                document TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            CREATE INDEX IF NOT EXISTS idx_game_logs_owner_played
                ON game_logs (owner_id, played_at DESC);
            CREATE INDEX IF NOT EXISTS idx_game_logs_public_played
                ON game_logs (is_public, played_at DESC);
            CREATE INDEX IF NOT EXISTS idx_game_logs_community_played
                ON game_logs (include_in_community_stats, played_at DESC);
        """)
        await self.conn.commit()

    # Player operations
    def _row_to_player(self, row) -> Player:
        return Player(
            id=row["id"],
            discord_id=row["discord_id"],
            username=row["username"],
            include_private_in_community=bool(row["include_private_in_community"]),
            created_at=datetime.fromisoformat(row["created_at"])
        )

    async def get_or_create_player(self, discord_id: str, username: str) -> Player:
        """Get existing player or create new one."""
        async with self.conn.execute(
            "SELECT * FROM players WHERE discord_id = ?",
            (discord_id,)
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                # Update username if changed
                if row["username"] != username:
                    await self.conn.execute(
                        "UPDATE players SET username = ? WHERE id = ?",
                        (username, row["id"])
                    )
                    await self.conn.commit()
                player = self._row_to_player(row)
                player.username = username
                return player

        try:
            async with self.conn.execute(
                "INSERT INTO players (discord_id, username) VALUES (?, ?)",
                (discord_id, username)
            ) as cursor:
                player_id = cursor.lastrowid
            await self.conn.commit()
        except aiosqlite.IntegrityError:
            # Created concurrently by another command
            return await self.get_player_by_discord_id(discord_id)

        log("DB", f"Created player {username} (discord_id={discord_id})", Colors.BLUE)
        return Player(
            id=player_id,
            discord_id=discord_id,
            username=username,
            include_private_in_community=False,
            created_at=datetime.now()
        )

    async def get_player_by_discord_id(self, discord_id: str) -> Optional[Player]:
        """Get player by Discord ID."""
        async with self.conn.execute(
            "SELECT * FROM players WHERE discord_id = ?",
            (discord_id,)
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                return self._row_to_player(row)
        log("DB", f"No player found for discord_id={discord_id}", Colors.YELLOW)
        return None

    async def set_community_preference(self, discord_id: str, include_private: bool) -> int:
        """Opt a player's private logs in or out of community stats.

        Returns the number of logs whose community flag changed.
        """
        await self.conn.execute(
            "UPDATE players SET include_private_in_community = ? WHERE discord_id = ?",
            (int(include_private), discord_id)
        )

        changed = 0
        async with self.conn.execute(
            "SELECT id, document FROM game_logs WHERE owner_id = ?",
            (discord_id,)
        ) as cursor:
            rows = await cursor.fetchall()

        for row in rows:
            document = json.loads(row["document"])
            flag = resolve_community_flag(document.get("isPublic", False), include_private)
            if document.get("includeInCommunityStats") == flag:
                continue
            document["includeInCommunityStats"] = flag
            await self.conn.execute(
                "UPDATE game_logs SET document = ?, include_in_community_stats = ?, "
                "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (encode_document(document), int(flag), row["id"])
            )
            changed += 1

        await self.conn.commit()
        log("DB", f"Community preference for {discord_id} -> {include_private} ({changed} logs updated)", Colors.BLUE)
        return changed

    # Game log operations
    def _row_to_game_log(self, row) -> GameLog:
        return GameLog.from_document(
            json.loads(row["document"]),
            record_id=row["id"],
            created_at=_parse_timestamp(row["created_at"]),
            updated_at=_parse_timestamp(row["updated_at"]),
        )

    async def create_game_log(self, game_log: GameLog) -> GameLog:
        """Insert a new game log."""
        document = game_log.to_document()
        async with self.conn.execute(
            """
            INSERT INTO game_logs (
                owner_id, played_at, format, outcome,
                is_public, include_in_community_stats, document
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                game_log.owner_id,
                document["playedAt"],
                game_log.format,
                game_log.outcome,
                int(game_log.is_public),
                int(game_log.include_in_community_stats),
                encode_document(document),
            )
        ) as cursor:
            log_id = cursor.lastrowid
        await self.conn.commit()

        log("DB", f"Created game log #{log_id} for owner {game_log.owner_id}", Colors.BLUE)
        return await self.get_game_log(log_id)

    async def get_game_log(self, log_id: int) -> Optional[GameLog]:
        """Get a game log by ID."""
        async with self.conn.execute(
            "SELECT * FROM game_logs WHERE id = ?",
            (log_id,)
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                return self._row_to_game_log(row)
        return None

    async def update_game_log(self, log_id: int, diff: UpdateDiff) -> Optional[GameLog]:
        """Apply a set/unset diff to a stored game log."""
        async with self.conn.execute(
            "SELECT document FROM game_logs WHERE id = ?",
            (log_id,)
        ) as cursor:
            row = await cursor.fetchone()
            if not row:
                return None

        document = json.loads(row["document"])
        updated = apply_update(document, diff)
        # Round trip through the record so the stored shape stays canonical
        game_log = GameLog.from_document(json.loads(encode_document(updated)), record_id=log_id)
        document = game_log.to_document()

        await self.conn.execute(
            """
            UPDATE game_logs SET
                played_at = ?, format = ?, outcome = ?,
                is_public = ?, include_in_community_stats = ?,
                document = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            (
                document["playedAt"],
                game_log.format,
                game_log.outcome,
                int(game_log.is_public),
                int(game_log.include_in_community_stats),
                encode_document(document),
                log_id,
            )
        )
        await self.conn.commit()

        log("DB", f"Updated game log #{log_id}: set={sorted(diff.set_fields)} unset={sorted(diff.unset_fields)}", Colors.BLUE)
        return await self.get_game_log(log_id)

    async def delete_game_log(self, log_id: int) -> bool:
        """Delete a game log. Returns False if it did not exist."""
        async with self.conn.execute(
            "DELETE FROM game_logs WHERE id = ?",
            (log_id,)
        ) as cursor:
            deleted = cursor.rowcount
        await self.conn.commit()
        return deleted == 1

    def _owner_filters(
        self,
        owner_id: str,
        format: Optional[str],
        outcome: Optional[str]
    ) -> tuple[str, list]:
        clauses = ["owner_id = ?"]
        params: list = [owner_id]
        if format:
            clauses.append("format = ?")
            params.append(format)
        if outcome:
            clauses.append("outcome = ?")
            params.append(outcome)
        return " AND ".join(clauses), params

    async def list_user_game_logs(
        self,
        owner_id: str,
        format: Optional[str] = None,
        outcome: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> list[GameLog]:
        """Get a player's game logs, newest first."""
        where, params = self._owner_filters(owner_id, format, outcome)
        async with self.conn.execute(
            f"SELECT * FROM game_logs WHERE {where} ORDER BY played_at DESC, id DESC LIMIT ? OFFSET ?",
            (*params, limit, offset)
        ) as cursor:
            return [self._row_to_game_log(row) async for row in cursor]

    async def count_user_game_logs(
        self,
        owner_id: str,
        format: Optional[str] = None,
        outcome: Optional[str] = None
    ) -> int:
        """Count a player's game logs."""
        where, params = self._owner_filters(owner_id, format, outcome)
        async with self.conn.execute(
            f"SELECT COUNT(*) FROM game_logs WHERE {where}",
            params
        ) as cursor:
            row = await cursor.fetchone()
            return row[0]

    async def fetch_stats_records(
        self,
        scope: str,
        owner_id: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ) -> list[GameLog]:
        """Load the game logs a stats query may cover.

        The scope and date filters here mirror the aggregator's, so the
        aggregator sees the same set either way.
        """
        if scope not in SCOPES:
            raise ValueError(f"Invalid scope: {scope!r}")

        clauses = []
        params: list = []
        if scope == SCOPE_MINE:
            if not owner_id:
                raise OwnerRequiredError("owner_id is required for personal stats")
            clauses.append("owner_id = ?")
            params.append(owner_id)
        else:
            clauses.append("(is_public = 1 OR include_in_community_stats = 1)")
        if date_from:
            clauses.append("played_at >= ?")
            params.append(isoformat_utc(date_from))
        if date_to:
            clauses.append("played_at <= ?")
            params.append(isoformat_utc(date_to))

        async with self.conn.execute(
            f"SELECT * FROM game_logs WHERE {' AND '.join(clauses)} ORDER BY played_at",
            params
        ) as cursor:
            records = [self._row_to_game_log(row) async for row in cursor]

        log("DB", f"fetch_stats_records(scope={scope}) -> {len(records)} logs", Colors.BLUE)
        return records
