"""Review queue selection: which cards are due, and in what order."""
import logging
import random
from datetime import date
from typing import Iterable, Optional

from studydeck.models import Card, CardStatus, ReviewMode

logger = logging.getLogger(__name__)


def is_due(card: Card, today: date) -> bool:
    """A card is due when it is not mastered and its date is unset or not in the future."""
    if card.status is CardStatus.MASTERED:
        return False
    return card.next_review_date is None or card.next_review_date <= today


def _due_order(card: Card) -> tuple:
    # Undated cards sort ahead of every dated card.
    dated = card.next_review_date is not None
    return (dated, card.next_review_date or date.min, card.status is not CardStatus.NEW)


def select_review_queue(
    cards: Iterable[Card],
    today: date,
    mode=ReviewMode.DUE_ONLY,
    rng: Optional[random.Random] = None,
) -> list[Card]:
    """Build the ordered list of cards to review.

    In due-only mode mastered cards are dropped and the rest are filtered to
    those due on ``today``, oldest date first and new cards ahead of others on
    the same date. In "all" mode every card is returned in shuffled order.
    An empty collection gives an empty list.
    """
    mode = ReviewMode.parse(mode)
    cards = list(cards)
    if mode is ReviewMode.ALL:
        queue = cards[:]
        (rng or random).shuffle(queue)
    else:
        queue = sorted((c for c in cards if is_due(c, today)), key=_due_order)
    logger.debug("Selected %d of %d cards (%s)", len(queue), len(cards), mode.value)
    return queue


def get_statistics(cards: Iterable[Card], today: date) -> dict:
    cards = list(cards)
    return {
        "total": len(cards),
        "new": sum(1 for c in cards if c.status is CardStatus.NEW),
        "learning": sum(1 for c in cards if c.status is CardStatus.LEARNING),
        "mastered": sum(1 for c in cards if c.status is CardStatus.MASTERED),
        "due_today": sum(1 for c in cards if is_due(c, today)),
    }
