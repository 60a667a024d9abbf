# tests/test_integration.py
"""End-to-end test of the review workflow over several days."""
from datetime import date, timedelta

from studydeck.cards import get_card, get_review_queue
from studydeck.dashboard import get_progress
from studydeck.db import init_db
from studydeck.models import CardStatus
from studydeck.seed import seed_starter_cards
from studydeck.session import ReviewSession, SessionState


def test_review_days_workflow(tmp_db):
    day1 = date(2024, 1, 1)
    init_db(tmp_db)
    assert seed_starter_cards(tmp_db, today=day1) == 10

    # Day 1: every starter card is due
    session = ReviewSession(tmp_db)
    assert session.start(today=day1) == 10
    ratings = ["Mastered", "Later", "TryAgain"] * 3 + ["Later"]
    reviewed = []
    for rating in ratings:
        reviewed.append((session.current_card().id, rating))
        session.rate(rating, today=day1)
    assert session.state is SessionState.COMPLETED

    stats = get_progress(tmp_db, today=day1)
    assert stats["mastered"] == 3
    assert stats["learning"] == 7
    assert stats["due_today"] == 0
    assert stats["reviews_today"] == 10

    # Day 2: Later (1 * 1.3 -> 1) and TryAgain cards come back; mastered never do
    day2 = day1 + timedelta(days=1)
    queue = get_review_queue(tmp_db, today=day2)
    assert len(queue) == 7
    assert all(c.status is CardStatus.LEARNING for c in queue)

    # A mastered card stays out of the queue even long after its date
    mastered_id = next(card_id for card_id, rating in reviewed if rating == "Mastered")
    assert get_card(tmp_db, mastered_id).next_review_date == day1 + timedelta(days=2)
    far = day1 + timedelta(days=400)
    assert mastered_id not in {c.id for c in get_review_queue(tmp_db, today=far)}

    # Rating a learning card Mastered from a grown interval
    session = ReviewSession(tmp_db)
    session.start(today=day2)
    card_id = session.current_card().id
    schedule = session.rate("Mastered", today=day2)
    assert schedule.new_interval == 2
    assert get_card(tmp_db, card_id).next_review_date == day2 + timedelta(days=2)
