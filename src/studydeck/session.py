"""Review session driver with a resumable queue snapshot.

A session takes a fixed snapshot of card ids when it starts and walks it one
card at a time. The snapshot never follows later card changes; starting
again builds a new one. Progress is saved in ``user_settings`` after every
step so an interrupted session can be resumed.
"""
import logging
from datetime import date
from enum import Enum
from typing import Optional

from studydeck.cards import CardNotFoundError, get_card, get_review_queue, record_review
from studydeck.db import delete_setting, get_setting, set_setting
from studydeck.models import Card, ReviewMode, Schedule, SessionSnapshot

logger = logging.getLogger(__name__)

SNAPSHOT_KEY_PREFIX = "review_session:"


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class SessionStateError(RuntimeError):
    """Raised when a session operation is not valid in the current state."""


def snapshot_key(scope_id: str) -> str:
    return f"{SNAPSHOT_KEY_PREFIX}{scope_id}"


class ReviewSession:
    def __init__(self, db_path: str, scope_id: str = "default"):
        self.db_path = db_path
        self.scope_id = scope_id
        self.snapshot: Optional[SessionSnapshot] = None
        self.state = SessionState.NOT_STARTED

    @classmethod
    def resume(cls, db_path: str, scope_id: str = "default") -> Optional["ReviewSession"]:
        """Restore a saved, unfinished session, or return None."""
        raw = get_setting(db_path, snapshot_key(scope_id))
        if raw is None:
            return None
        session = cls(db_path, scope_id)
        session.snapshot = SessionSnapshot.from_json(raw)
        session.state = SessionState.IN_PROGRESS
        session._skip_missing()
        if session.state is SessionState.COMPLETED:
            return None
        logger.info("Resumed %s session at %d/%d", scope_id, session.position, session.total)
        return session

    def start(self, mode=ReviewMode.DUE_ONLY, today: Optional[date] = None, rng=None) -> int:
        """Select the queue and freeze it as this session's snapshot.

        Returns the number of cards queued. Starting a completed session
        begins a fresh snapshot.
        """
        if self.state is SessionState.IN_PROGRESS:
            raise SessionStateError("Session already in progress")
        mode = ReviewMode.parse(mode)
        queue = get_review_queue(self.db_path, today=today, mode=mode, rng=rng)
        self.snapshot = SessionSnapshot(
            queue_card_ids=[c.id for c in queue],
            current_index=0,
            mode=mode,
            scope_id=self.scope_id,
        )
        self.state = SessionState.IN_PROGRESS
        logger.info("Started %s session with %d cards", mode.value, len(queue))
        self._skip_missing()
        return len(queue)

    @property
    def total(self) -> int:
        return len(self.snapshot.queue_card_ids) if self.snapshot else 0

    @property
    def position(self) -> int:
        return self.snapshot.current_index if self.snapshot else 0

    @property
    def remaining(self) -> int:
        return max(0, self.total - self.position)

    @property
    def mode(self) -> Optional[ReviewMode]:
        return self.snapshot.mode if self.snapshot else None

    def current_card(self) -> Optional[Card]:
        """The next live card in the snapshot, or None once the session is over."""
        while self.state is SessionState.IN_PROGRESS:
            self._skip_missing()
            if self.state is not SessionState.IN_PROGRESS:
                break
            card = get_card(self.db_path, self.snapshot.queue_card_ids[self.snapshot.current_index])
            if card is not None:
                return card
        return None

    def rate(self, rating, today: Optional[date] = None) -> Schedule:
        """Record a rating for the current card and move to the next one.

        A card deleted since it became current is passed over and the rating
        goes to the next live card.
        """
        if self.state is not SessionState.IN_PROGRESS:
            raise SessionStateError(f"Cannot rate a card in state {self.state.value}")
        while True:
            self._skip_missing()
            if self.state is not SessionState.IN_PROGRESS:
                raise SessionStateError("No cards left to rate")
            card_id = self.snapshot.queue_card_ids[self.snapshot.current_index]
            try:
                schedule = record_review(self.db_path, card_id, rating, today=today)
            except CardNotFoundError:
                logger.debug("Card %s deleted before rating", card_id)
                continue
            break
        self.snapshot.current_index += 1
        self._skip_missing()
        return schedule

    def discard(self) -> None:
        delete_setting(self.db_path, snapshot_key(self.scope_id))
        self.snapshot = None
        self.state = SessionState.NOT_STARTED

    def _skip_missing(self) -> None:
        # Cards deleted since the snapshot was taken are passed over.
        ids = self.snapshot.queue_card_ids
        while self.snapshot.current_index < len(ids):
            card_id = ids[self.snapshot.current_index]
            if get_card(self.db_path, card_id) is not None:
                break
            logger.debug("Skipping deleted card %s", card_id)
            self.snapshot.current_index += 1
        if self.snapshot.current_index >= len(ids):
            self.state = SessionState.COMPLETED
            delete_setting(self.db_path, snapshot_key(self.scope_id))
            logger.info("Session %s completed", self.scope_id)
        else:
            set_setting(self.db_path, snapshot_key(self.scope_id), self.snapshot.to_json())
