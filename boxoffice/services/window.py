from datetime import datetime, timedelta, timezone


def occupied_window(start: datetime, duration_minutes: int, buffer_minutes: int) -> tuple[datetime, datetime]:
    """
    Return the half-open interval ``[start, end)`` a showing keeps its room busy.

    The turnaround buffer is appended after the show only:
    ``end = start + duration + buffer``.
    """
    return start, start + timedelta(minutes=duration_minutes + buffer_minutes)


def to_utc_naive(value: datetime) -> datetime:
    """Normalise an instant to naive UTC, the form showings are stored in."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
