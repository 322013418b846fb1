"""
revisit.instant
---------

Helpers for the epoch-millisecond instants stored on review states.

One day is exactly DAY_MS milliseconds; no calendar or timezone arithmetic is done here.
"""

from __future__ import annotations
from datetime import date, datetime, timedelta, timezone
import time

DAY_MS = 86_400_000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_ms() -> int:
    """Returns the current time in epoch milliseconds."""

    return int(time.time() * 1000)


def to_epoch_ms(value: int | datetime | date | str) -> int:
    """
    Converts an instant into epoch milliseconds.

    Args:
        value: Epoch milliseconds, a timezone-aware datetime, a date, or an ISO 8601 string.
            Dates and date-only strings ("2024-05-01") resolve to midnight UTC of that day.

    Returns:
        The instant in epoch milliseconds.

    Raises:
        ValueError: If a datetime is not timezone-aware or a string can not be parsed.
        TypeError: If the value is of an unsupported type.
    """

    if isinstance(value, bool):
        raise TypeError(f"Unsupported instant: {value!r}")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        text = value.strip()
        # fromisoformat only accepts a "Z" suffix from Python 3.11
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            if len(text) == 10:
                value = date.fromisoformat(text)
            else:
                value = datetime.fromisoformat(text)
        except ValueError as e:
            raise ValueError(f"Could not parse instant: {value!r}") from e

    if isinstance(value, datetime):
        if value.tzinfo is None:
            raise ValueError("datetime must be timezone-aware")
        return (value - _EPOCH) // timedelta(milliseconds=1)

    if isinstance(value, date):
        midnight = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        return (midnight - _EPOCH) // timedelta(milliseconds=1)

    raise TypeError(f"Unsupported instant: {value!r}")


def end_of_day(instant: int) -> int:
    """Returns the last millisecond of the (UTC) day containing the instant."""

    return (instant // DAY_MS) * DAY_MS + DAY_MS - 1


__all__ = ["DAY_MS", "now_ms", "to_epoch_ms", "end_of_day"]
