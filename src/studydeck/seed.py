"""Seed the database with the bundled starter cards."""
import json
from datetime import date
from pathlib import Path
from typing import Optional

from studydeck.db import get_connection
from studydeck.importer import import_pairs, parse_source_items

CONTENT_DIR = Path(__file__).parent / "content"


def is_seeded(db_path: str) -> bool:
    """Check whether any starter card has been inserted."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM cards WHERE source_question IS NOT NULL").fetchone()[0]
    conn.close()
    return count > 0


def load_starter_cards() -> list[tuple[str, str]]:
    data = json.loads((CONTENT_DIR / "starter_cards.json").read_text())
    return parse_source_items(data)


def seed_starter_cards(db_path: str, today: Optional[date] = None) -> int:
    """Insert starter cards not already present. Returns the number added."""
    added, _ = import_pairs(db_path, load_starter_cards(), today=today)
    return added
