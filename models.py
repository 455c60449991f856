"""Data models for the Game Log Tracker Bot."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, ClassVar, Optional, Union

from config import FORMAT_CONSTRUCTED, FORMAT_LIVE_DRAFT, DEFAULT_TITLE
from utils.dates import isoformat_utc, to_utc


@dataclass
class Player:
    """Represents a player in the database."""

    id: int
    discord_id: str
    username: str
    include_private_in_community: bool
    created_at: datetime


@dataclass
class Opponent:
    """One opponent row of a game log."""

    name: str = ""
    user_id: Optional[str] = None
    elements: list[str] = field(default_factory=list)
    external_deck_url: Optional[str] = None
    mvp_card_ids: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.name or self.elements or self.external_deck_url or self.mvp_card_ids)

    def to_document(self) -> dict:
        doc: dict[str, Any] = {"name": self.name}
        if self.user_id:
            doc["userId"] = self.user_id
        doc["elements"] = list(self.elements)
        if self.external_deck_url:
            doc["externalDeckUrl"] = self.external_deck_url
        doc["mvpCardIds"] = list(self.mvp_card_ids)
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "Opponent":
        return cls(
            name=doc.get("name") or "",
            user_id=doc.get("userId") or None,
            elements=list(doc.get("elements") or []),
            external_deck_url=doc.get("externalDeckUrl") or None,
            mvp_card_ids=list(doc.get("mvpCardIds") or []),
        )


@dataclass
class ConstructedDetails:
    """Constructed arm of a game log: which deck was played."""

    FORMAT: ClassVar[str] = FORMAT_CONSTRUCTED
    DOCUMENT_KEY: ClassVar[str] = "constructed"

    deck_id: Optional[str] = None
    external_deck_url: Optional[str] = None
    teammate_deck_id: Optional[str] = None
    teammate_external_deck_url: Optional[str] = None

    def to_document(self) -> dict:
        doc = {}
        if self.deck_id:
            doc["deckId"] = self.deck_id
        if self.external_deck_url:
            doc["externalDeckUrl"] = self.external_deck_url
        if self.teammate_deck_id:
            doc["teammateDeckId"] = self.teammate_deck_id
        if self.teammate_external_deck_url:
            doc["teammateExternalDeckUrl"] = self.teammate_external_deck_url
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "ConstructedDetails":
        return cls(
            deck_id=doc.get("deckId") or None,
            external_deck_url=doc.get("externalDeckUrl") or None,
            teammate_deck_id=doc.get("teammateDeckId") or None,
            teammate_external_deck_url=doc.get("teammateExternalDeckUrl") or None,
        )


@dataclass
class LiveDraftDetails:
    """Live-draft arm of a game log: elements drafted and MVP cards."""

    FORMAT: ClassVar[str] = FORMAT_LIVE_DRAFT
    DOCUMENT_KEY: ClassVar[str] = "liveDraft"

    elements_played: list[str] = field(default_factory=list)
    mvp_card_ids: list[str] = field(default_factory=list)

    def to_document(self) -> dict:
        return {
            "elementsPlayed": list(self.elements_played),
            "mvpCardIds": list(self.mvp_card_ids),
        }

    @classmethod
    def from_document(cls, doc: dict) -> "LiveDraftDetails":
        return cls(
            elements_played=list(doc.get("elementsPlayed") or []),
            mvp_card_ids=list(doc.get("mvpCardIds") or []),
        )


FormatDetails = Union[ConstructedDetails, LiveDraftDetails]

DETAILS_BY_FORMAT: dict[str, type] = {
    ConstructedDetails.FORMAT: ConstructedDetails,
    LiveDraftDetails.FORMAT: LiveDraftDetails,
}


@dataclass
class GameLog:
    """One played match, owned by exactly one player.

    The format is carried by the type of ``details``: a constructed log has
    no live-draft payload to go stale, and the other way around.
    """

    id: Optional[int]
    owner_id: str
    played_at: datetime
    duration_minutes: float
    outcome: str
    match_type: str
    details: FormatDetails
    title: str = DEFAULT_TITLE
    match_type_label: Optional[str] = None
    is_public: bool = False
    include_in_community_stats: bool = False
    opponents: list[Opponent] = field(default_factory=list)
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def format(self) -> str:
        return self.details.FORMAT

    def to_document(self) -> dict:
        """Serialize to the camelCase wire document (only the active arm)."""
        doc: dict[str, Any] = {
            "userId": self.owner_id,
            "title": self.title,
            "playedAt": isoformat_utc(self.played_at),
            "durationMinutes": self.duration_minutes,
            "outcome": self.outcome,
            "format": self.format,
            "matchType": self.match_type,
            "isPublic": self.is_public,
            "includeInCommunityStats": self.include_in_community_stats,
            "opponents": [o.to_document() for o in self.opponents],
            self.details.DOCUMENT_KEY: self.details.to_document(),
        }
        if self.match_type_label:
            doc["matchTypeLabel"] = self.match_type_label
        if self.notes:
            doc["notes"] = self.notes
        return doc

    @classmethod
    def from_document(
        cls,
        doc: dict,
        record_id: Optional[int] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> "GameLog":
        """Build a record from a stored document.

        Only the arm matching ``format`` is read; any other arm is dropped.
        """
        details_cls = DETAILS_BY_FORMAT.get(doc.get("format"))
        if details_cls is None:
            raise ValueError(f"Unknown game log format: {doc.get('format')!r}")
        details = details_cls.from_document(doc.get(details_cls.DOCUMENT_KEY) or {})

        return cls(
            id=record_id,
            owner_id=str(doc["userId"]),
            played_at=to_utc(doc["playedAt"]),
            duration_minutes=doc.get("durationMinutes", 0),
            outcome=doc["outcome"],
            match_type=doc["matchType"],
            details=details,
            title=doc.get("title") or DEFAULT_TITLE,
            match_type_label=doc.get("matchTypeLabel") or None,
            is_public=bool(doc.get("isPublic", False)),
            include_in_community_stats=bool(doc.get("includeInCommunityStats", False)),
            opponents=[Opponent.from_document(o) for o in doc.get("opponents") or []],
            notes=doc.get("notes") or None,
            created_at=created_at,
            updated_at=updated_at,
        )


@dataclass
class ValidationResult:
    """Outcome of validating a game log payload."""

    errors: list[str] = field(default_factory=list)
    field_errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add(self, path: str, message: str) -> None:
        self.errors.append(message)
        self.field_errors.setdefault(path, []).append(message)

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "fieldErrors": {k: list(v) for k, v in self.field_errors.items()},
        }


@dataclass
class UpdateDiff:
    """Fields to write and fields to remove for a partial update."""

    set_fields: dict[str, Any] = field(default_factory=dict)
    unset_fields: set[str] = field(default_factory=set)

    def is_empty(self) -> bool:
        return not self.set_fields and not self.unset_fields


@dataclass
class Breakdown:
    """Win/loss/draw counts for one value of a stats dimension."""

    key: str
    total: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    win_rate: float = 0.0

    def count(self, outcome: str) -> None:
        self.total += 1
        if outcome == "win":
            self.wins += 1
        elif outcome == "loss":
            self.losses += 1
        elif outcome == "draw":
            self.draws += 1

    def copy(self, **changes) -> "Breakdown":
        return replace(self, **changes)

    def to_dict(self, key_name: str = "key") -> dict:
        return {
            key_name: self.key,
            "total": self.total,
            "wins": self.wins,
            "losses": self.losses,
            "draws": self.draws,
            "winRate": self.win_rate,
        }


@dataclass
class Summary:
    """Overall totals for a stats query."""

    total: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    win_rate: float = 0.0
    avg_duration_minutes: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "wins": self.wins,
            "losses": self.losses,
            "draws": self.draws,
            "winRate": self.win_rate,
            "avgDurationMinutes": self.avg_duration_minutes,
        }


@dataclass
class RankedList:
    """Two leaderboards over the same breakdowns."""

    most_played: list[Breakdown]
    highest_win_rate: list[Breakdown]
    min_sample_size: int

    def to_dict(self, key_name: str = "key") -> dict:
        return {
            "mostPlayed": [b.to_dict(key_name) for b in self.most_played],
            "highestWinRate": [b.to_dict(key_name) for b in self.highest_win_rate],
            "minSampleSize": self.min_sample_size,
        }


@dataclass
class ActivityDay:
    """One cell of the activity heatmap."""

    date: date
    total: int
    level: int
    is_future: bool

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "total": self.total,
            "level": self.level,
            "isFuture": self.is_future,
        }


@dataclass
class StatsFacets:
    """Raw breakdowns computed from one filtered set of game logs."""

    summary: Summary
    by_format: list[Breakdown]
    by_match_type: list[Breakdown]
    by_day: list[Breakdown]
    by_element: list[Breakdown]
    by_mvp_card: list[Breakdown]
    by_deck: list[Breakdown]


@dataclass
class StatsReport:
    """Statistics response for one scope and date range."""

    scope: str
    date_from: Optional[datetime]
    date_to: Optional[datetime]
    summary: Summary
    by_format: list[Breakdown]
    by_match_type: list[Breakdown]
    time_series: list[Breakdown]
    elements: list[Breakdown]
    mvp_cards: RankedList
    decks: RankedList
    activity: list[ActivityDay] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize to the external camelCase response shape."""
        return {
            "scope": self.scope,
            "range": {
                "from": isoformat_utc(self.date_from) if self.date_from else None,
                "to": isoformat_utc(self.date_to) if self.date_to else None,
            },
            "summary": self.summary.to_dict(),
            "byFormat": [b.to_dict("format") for b in self.by_format],
            "byMatchType": [b.to_dict("matchType") for b in self.by_match_type],
            "timeSeries": [b.to_dict("day") for b in self.time_series],
            "elements": [b.to_dict("element") for b in self.elements],
            "mvpCards": self.mvp_cards.to_dict("cardId"),
            "decks": self.decks.to_dict("deckId"),
            "activity": [d.to_dict() for d in self.activity],
        }
