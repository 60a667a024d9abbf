"""Calendar-day helpers shared by the scheduler, queue and store."""
from datetime import date, datetime, timedelta


def today() -> date:
    return date.today()


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def to_iso(day: date | None) -> str | None:
    return day.isoformat() if day is not None else None


def parse_iso(value) -> date | None:
    """Parse a stored date value.

    Accepts a ``YYYY-MM-DD`` string, a full ISO datetime string (the time part
    is dropped) or a ``date``. ``None`` and empty strings give ``None``.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) > 10:
        return datetime.fromisoformat(text).date()
    return date.fromisoformat(text)
