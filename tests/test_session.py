# tests/test_session.py
import random
from datetime import date, timedelta

import pytest

from studydeck.cards import add_card, add_cards, delete_card, get_card, update_card
from studydeck.db import get_setting, init_db
from studydeck.models import CardStatus, ReviewMode, SessionSnapshot
from studydeck.session import ReviewSession, SessionState, SessionStateError, snapshot_key

TODAY = date(2024, 6, 1)


@pytest.fixture
def db(tmp_db):
    init_db(tmp_db)
    return tmp_db


def test_new_session_not_started(db):
    session = ReviewSession(db)
    assert session.state is SessionState.NOT_STARTED
    assert session.current_card() is None
    assert session.total == 0


def test_start_with_no_cards_completes_immediately(db):
    session = ReviewSession(db)
    assert session.start(today=TODAY) == 0
    assert session.state is SessionState.COMPLETED


def test_full_session_walk(db):
    cards = add_cards(db, [("Q1", "A1"), ("Q2", "A2")], today=TODAY)
    session = ReviewSession(db)
    assert session.start(ReviewMode.DUE_ONLY, today=TODAY) == 2
    assert session.state is SessionState.IN_PROGRESS
    assert session.current_card().id == cards[0].id

    session.rate("Mastered", today=TODAY)
    assert session.position == 1
    assert session.remaining == 1
    assert session.current_card().id == cards[1].id

    schedule = session.rate("TryAgain", today=TODAY)
    assert schedule.new_interval == 1
    assert session.state is SessionState.COMPLETED
    assert session.current_card() is None
    assert get_card(db, cards[0].id).status is CardStatus.MASTERED


def test_rate_outside_progress_raises(db):
    session = ReviewSession(db)
    with pytest.raises(SessionStateError):
        session.rate("Mastered", today=TODAY)


def test_start_twice_raises(db):
    add_card(db, "Q", "A", today=TODAY)
    session = ReviewSession(db)
    session.start(today=TODAY)
    with pytest.raises(SessionStateError):
        session.start(today=TODAY)


def test_snapshot_does_not_follow_card_changes(db):
    first, second = add_cards(db, [("Q1", "A1"), ("Q2", "A2")], today=TODAY)
    session = ReviewSession(db)
    session.start(today=TODAY)
    # Card becomes not-due after the snapshot was taken; it stays queued.
    update_card(db, second.id, next_review_date=TODAY + timedelta(days=10), status="learning")
    add_card(db, "Q3", "A3", today=TODAY)
    assert session.total == 2
    session.rate("Later", today=TODAY)
    assert session.current_card().id == second.id


def test_restart_after_completion_builds_new_snapshot(db):
    add_card(db, "Q1", "A1", today=TODAY)
    session = ReviewSession(db)
    session.start(today=TODAY)
    session.rate("Mastered", today=TODAY)
    assert session.state is SessionState.COMPLETED
    add_card(db, "Q2", "A2", today=TODAY)
    assert session.start(today=TODAY) == 1
    assert session.state is SessionState.IN_PROGRESS


def test_deleted_cards_are_skipped(db):
    cards = add_cards(db, [("Q1", "A1"), ("Q2", "A2"), ("Q3", "A3")], today=TODAY)
    session = ReviewSession(db)
    session.start(today=TODAY)
    delete_card(db, cards[1].id)
    session.rate("Later", today=TODAY)
    assert session.current_card().id == cards[2].id


def test_current_card_deleted_moves_to_next(db):
    cards = add_cards(db, [("Q1", "A1"), ("Q2", "A2"), ("Q3", "A3")], today=TODAY)
    session = ReviewSession(db)
    session.start(today=TODAY)
    assert session.current_card().id == cards[0].id
    delete_card(db, cards[0].id)

    assert session.current_card().id == cards[1].id
    session.rate("Mastered", today=TODAY)
    assert get_card(db, cards[1].id).status is CardStatus.MASTERED
    assert session.current_card().id == cards[2].id


def test_rate_after_current_card_deleted_rates_next(db):
    cards = add_cards(db, [("Q1", "A1"), ("Q2", "A2")], today=TODAY)
    session = ReviewSession(db)
    session.start(today=TODAY)
    delete_card(db, cards[0].id)

    schedule = session.rate("Mastered", today=TODAY)
    assert schedule.new_interval == 2
    assert get_card(db, cards[1].id).status is CardStatus.MASTERED
    assert session.state is SessionState.COMPLETED


def test_deleting_last_current_card_completes(db):
    card = add_card(db, "Q1", "A1", today=TODAY)
    session = ReviewSession(db)
    session.start(today=TODAY)
    delete_card(db, card.id)

    assert session.current_card() is None
    assert session.state is SessionState.COMPLETED
    assert get_setting(db, snapshot_key("default")) is None
    with pytest.raises(SessionStateError):
        session.rate("Later", today=TODAY)


def test_progress_saved_and_resumed(db):
    cards = add_cards(db, [("Q1", "A1"), ("Q2", "A2"), ("Q3", "A3")], today=TODAY)
    session = ReviewSession(db, scope_id="morning")
    session.start(today=TODAY)
    session.rate("Later", today=TODAY)

    saved = SessionSnapshot.from_json(get_setting(db, snapshot_key("morning")))
    assert saved.current_index == 1
    assert saved.queue_card_ids == [c.id for c in cards]

    resumed = ReviewSession.resume(db, scope_id="morning")
    assert resumed.state is SessionState.IN_PROGRESS
    assert resumed.position == 1
    assert resumed.mode is ReviewMode.DUE_ONLY
    assert resumed.current_card().id == cards[1].id


def test_resume_without_snapshot_returns_none(db):
    assert ReviewSession.resume(db) is None


def test_completed_session_clears_snapshot(db):
    add_card(db, "Q1", "A1", today=TODAY)
    session = ReviewSession(db)
    session.start(today=TODAY)
    session.rate("Mastered", today=TODAY)
    assert get_setting(db, snapshot_key("default")) is None
    assert ReviewSession.resume(db) is None


def test_discard_removes_snapshot(db):
    add_cards(db, [("Q1", "A1"), ("Q2", "A2")], today=TODAY)
    session = ReviewSession(db)
    session.start(today=TODAY)
    session.discard()
    assert session.state is SessionState.NOT_STARTED
    assert ReviewSession.resume(db) is None


def test_scopes_are_independent(db):
    add_cards(db, [("Q1", "A1"), ("Q2", "A2")], today=TODAY)
    a = ReviewSession(db, scope_id="a")
    a.start(today=TODAY)
    assert ReviewSession.resume(db, scope_id="b") is None
    assert ReviewSession.resume(db, scope_id="a") is not None


def test_all_mode_includes_mastered_cards(db):
    cards = add_cards(db, [("Q1", "A1"), ("Q2", "A2")], today=TODAY)
    update_card(db, cards[0].id, status="mastered", next_review_date=TODAY + timedelta(days=40))
    session = ReviewSession(db)
    assert session.start(ReviewMode.ALL, today=TODAY, rng=random.Random(5)) == 2
    assert session.mode is ReviewMode.ALL
