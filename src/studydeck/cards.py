"""Card storage and rating persistence."""
import logging
import uuid
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional

from studydeck.dates import to_iso, today as local_today
from studydeck.db import get_connection
from studydeck.models import Card, CardStatus, PerformanceRating, Schedule
from studydeck.review_queue import select_review_queue
from studydeck.scheduler import compute_next_schedule

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("front", "back", "last_reviewed", "next_review_date", "interval", "status")


class CardNotFoundError(LookupError):
    """Raised when a card id does not exist in the store."""


def _to_column(value):
    if isinstance(value, date):
        return to_iso(value)
    if isinstance(value, Enum):
        return value.value
    return value


def add_card(
    db_path: str,
    front: str,
    back: str,
    today: Optional[date] = None,
    source_question: Optional[str] = None,
) -> Card:
    """Create a new card that is due immediately."""
    front, back = front.strip(), back.strip()
    if not front or not back:
        raise ValueError("Card front and back must not be empty")
    card = Card(
        id=uuid.uuid4().hex,
        front=front,
        back=back,
        last_reviewed=None,
        next_review_date=today or local_today(),
        interval=1,
        status=CardStatus.NEW,
        source_question=source_question,
        created_at=datetime.now().isoformat(),
    )
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO cards (id, front, back, last_reviewed, next_review_date, interval,
            status, source_question, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (card.id, card.front, card.back, None, to_iso(card.next_review_date), card.interval,
         card.status.value, card.source_question, card.created_at),
    )
    conn.commit()
    conn.close()
    logger.info("Added card %s", card.id)
    return card


def add_cards(db_path: str, pairs: Iterable[tuple[str, str]], today: Optional[date] = None) -> list[Card]:
    return [add_card(db_path, front, back, today=today) for front, back in pairs]


def get_card(db_path: str, card_id: str) -> Card | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM cards WHERE id = ?", (card_id,)).fetchone()
    conn.close()
    return Card.from_row(row) if row else None


def list_cards(db_path: str) -> list[Card]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM cards ORDER BY created_at, rowid").fetchall()
    conn.close()
    return [Card.from_row(r) for r in rows]


def get_source_questions(db_path: str) -> set[str]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT source_question FROM cards WHERE source_question IS NOT NULL").fetchall()
    conn.close()
    return {r["source_question"] for r in rows}


def update_card(db_path: str, card_id: str, **fields) -> Card:
    """Apply a partial update and return the stored card."""
    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f"Cannot update card fields: {', '.join(sorted(unknown))}")
    for name in ("front", "back"):
        if name in fields:
            fields[name] = fields[name].strip()
            if not fields[name]:
                raise ValueError("Card front and back must not be empty")
    if "status" in fields:
        fields["status"] = CardStatus(fields["status"])
    conn = get_connection(db_path)
    try:
        if fields:
            assignments = ", ".join(f"{name}=?" for name in fields)
            cursor = conn.execute(
                f"UPDATE cards SET {assignments} WHERE id=?",
                [_to_column(v) for v in fields.values()] + [card_id],
            )
            if cursor.rowcount == 0:
                raise CardNotFoundError(card_id)
            conn.commit()
        row = conn.execute("SELECT * FROM cards WHERE id = ?", (card_id,)).fetchone()
    finally:
        conn.close()
    if row is None:
        raise CardNotFoundError(card_id)
    logger.info("Updated card %s: %s", card_id, ", ".join(fields) or "no fields")
    return Card.from_row(row)


def delete_card(db_path: str, card_id: str) -> bool:
    conn = get_connection(db_path)
    cursor = conn.execute("DELETE FROM cards WHERE id = ?", (card_id,))
    conn.commit()
    conn.close()
    return cursor.rowcount > 0


def record_review(db_path: str, card_id: str, rating, today: Optional[date] = None) -> Schedule:
    """Schedule a card from a rating and write the result in one transaction."""
    rating = PerformanceRating.parse(rating)
    today = today or local_today()
    conn = get_connection(db_path)
    try:
        row = conn.execute("SELECT * FROM cards WHERE id = ?", (card_id,)).fetchone()
        if row is None:
            raise CardNotFoundError(card_id)
        schedule = compute_next_schedule(row["interval"], rating, today)
        conn.execute(
            """UPDATE cards SET last_reviewed=?, next_review_date=?, interval=?, status=?
            WHERE id=?""",
            (to_iso(today), to_iso(schedule.next_review_date), schedule.new_interval,
             schedule.new_status.value, card_id),
        )
        conn.execute(
            """INSERT INTO review_results (card_id, rating, previous_interval, new_interval, reviewed_at)
            VALUES (?, ?, ?, ?, ?)""",
            (card_id, rating.value, row["interval"], schedule.new_interval, to_iso(today)),
        )
        conn.commit()
    finally:
        conn.close()
    logger.info("Rated card %s %s: next review %s", card_id, rating.value, schedule.next_review_date)
    return schedule


def get_review_queue(db_path: str, today: Optional[date] = None, mode="dueOnly", rng=None) -> list[Card]:
    return select_review_queue(list_cards(db_path), today or local_today(), mode, rng=rng)
