"""Progress statistics for the dashboard."""
from datetime import date
from typing import Optional

from studydeck.cards import list_cards
from studydeck.dates import to_iso, today as local_today
from studydeck.db import get_connection
from studydeck.models import CardStatus
from studydeck.review_queue import get_statistics

STATUS_COLORS = {
    CardStatus.NEW: "blue",
    CardStatus.LEARNING: "yellow",
    CardStatus.MASTERED: "green",
}


def get_status_color(status: CardStatus) -> str:
    return STATUS_COLORS.get(CardStatus(status), "white")


def _review_counts(db_path: str, day: date) -> tuple[int, int]:
    conn = get_connection(db_path)
    total = conn.execute("SELECT COUNT(*) FROM review_results").fetchone()[0]
    on_day = conn.execute(
        "SELECT COUNT(*) FROM review_results WHERE reviewed_at = ?", (to_iso(day),)
    ).fetchone()[0]
    conn.close()
    return total, on_day


def get_progress(db_path: str, today: Optional[date] = None) -> dict:
    today = today or local_today()
    stats = get_statistics(list_cards(db_path), today)
    stats["reviews_total"], stats["reviews_today"] = _review_counts(db_path, today)
    return stats
