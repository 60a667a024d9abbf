"""Data classes for cards, ratings and review sessions."""
import json
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from studydeck.dates import parse_iso


class InvalidRatingError(ValueError):
    """Raised when a performance rating is not one of the known values."""


class CardStatus(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"


class PerformanceRating(str, Enum):
    MASTERED = "Mastered"
    LATER = "Later"
    TRY_AGAIN = "TryAgain"

    @classmethod
    def parse(cls, value) -> "PerformanceRating":
        """Resolve a rating from a member, its name or its value.

        The older spelling "Try Again" is accepted. Anything else raises
        InvalidRatingError instead of falling back to a default.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.replace(" ", "").replace("_", "").lower()
            for member in cls:
                if key in (member.value.lower(), member.name.replace("_", "").lower()):
                    return member
        raise InvalidRatingError(f"Unknown performance rating: {value!r}")


class ReviewMode(str, Enum):
    DUE_ONLY = "dueOnly"
    ALL = "all"

    @classmethod
    def parse(cls, value) -> "ReviewMode":
        if isinstance(value, cls):
            return value
        for member in cls:
            if value in (member.value, member.name.lower()):
                return member
        raise ValueError(f"Unknown review mode: {value!r}")


@dataclass
class Card:
    id: str
    front: str
    back: str
    last_reviewed: Optional[date] = None
    next_review_date: Optional[date] = None
    interval: int = 1
    status: CardStatus = CardStatus.NEW
    source_question: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Card":
        return cls(
            id=row["id"],
            front=row["front"],
            back=row["back"],
            last_reviewed=parse_iso(row["last_reviewed"]),
            next_review_date=parse_iso(row["next_review_date"]),
            interval=row["interval"],
            status=CardStatus(row["status"]),
            source_question=row["source_question"],
            created_at=row["created_at"],
        )


@dataclass(frozen=True)
class Schedule:
    new_interval: int
    next_review_date: date
    new_status: CardStatus


@dataclass
class SessionSnapshot:
    """Serializable state of an in-progress review session."""
    queue_card_ids: list = field(default_factory=list)
    current_index: int = 0
    mode: ReviewMode = ReviewMode.DUE_ONLY
    scope_id: str = "default"

    def to_json(self) -> str:
        return json.dumps({
            "queue_card_ids": list(self.queue_card_ids),
            "current_index": self.current_index,
            "mode": self.mode.value,
            "scope_id": self.scope_id,
        })

    @classmethod
    def from_json(cls, text: str) -> "SessionSnapshot":
        data = json.loads(text)
        return cls(
            queue_card_ids=list(data["queue_card_ids"]),
            current_index=int(data["current_index"]),
            mode=ReviewMode.parse(data["mode"]),
            scope_id=data.get("scope_id", "default"),
        )
