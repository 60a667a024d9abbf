"""Interval scheduling for the three-button review flow."""
import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from studydeck.dates import add_days, to_iso
from studydeck.models import Card, CardStatus, PerformanceRating, Schedule

logger = logging.getLogger(__name__)

MASTERED_MULTIPLIER = 2
LATER_MULTIPLIER = 1.3
TRY_AGAIN_INTERVAL = 1
MIN_INTERVAL = 1
MAX_INTERVAL = 365


def normalize_interval(value) -> int:
    """Return a usable base interval.

    Missing, non-numeric, fractional and non-positive values become 1.
    Whole-number floats such as 3.0 are accepted. Values above MAX_INTERVAL
    are capped there; every multiplier already clamps them to the same result.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return MIN_INTERVAL
    if isinstance(value, float) and not value.is_integer():  # also NaN and inf
        return MIN_INTERVAL
    if value <= 0:
        return MIN_INTERVAL
    return min(int(value), MAX_INTERVAL)


def round_half_up(value) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def clamp_interval(value: int) -> int:
    return max(MIN_INTERVAL, min(value, MAX_INTERVAL))


def compute_next_schedule(current_interval, rating, today: date) -> Schedule:
    """Calculate the next interval, due date and status for a rated card.

    Args:
        current_interval: Card's interval in days. Absent or non-positive
            values are treated as 1.
        rating: PerformanceRating, or a string accepted by
            PerformanceRating.parse.
        today: Calendar date of the rating.

    Returns:
        Schedule with the clamped interval, today + interval, and the status.

    Raises:
        InvalidRatingError: if ``rating`` is not a known rating.
    """
    rating = PerformanceRating.parse(rating)
    base = normalize_interval(current_interval)

    if rating is PerformanceRating.MASTERED:
        raw = round_half_up(base * MASTERED_MULTIPLIER)
        status = CardStatus.MASTERED
    elif rating is PerformanceRating.LATER:
        raw = round_half_up(base * LATER_MULTIPLIER)
        status = CardStatus.LEARNING
    else:
        raw = TRY_AGAIN_INTERVAL
        status = CardStatus.LEARNING

    new_interval = clamp_interval(raw)
    schedule = Schedule(
        new_interval=new_interval,
        next_review_date=add_days(today, new_interval),
        new_status=status,
    )
    logger.debug("Scheduled %s from interval %r: %s", rating.value, current_interval, schedule)
    return schedule


def schedule_updates(schedule: Schedule, today: date) -> dict:
    """The four card fields a rating event writes, as a partial update."""
    return {
        "last_reviewed": today,
        "next_review_date": schedule.next_review_date,
        "interval": schedule.new_interval,
        "status": schedule.new_status,
    }


def apply_schedule(card: Card, schedule: Schedule, today: date) -> Card:
    """Return a copy of ``card`` with the rating's effect applied."""
    return replace(card, **schedule_updates(schedule, today))


def describe_schedule(schedule: Schedule) -> str:
    return f"next review {to_iso(schedule.next_review_date)} ({schedule.new_interval}d)"
