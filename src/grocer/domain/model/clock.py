"""Time source for the domain.

Services and handlers take a ``clock`` callable instead of reading the
system time directly, so ledger timestamps and order expiry can be pinned
in tests.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from stores that drop the offset."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def day_window(start: date | None, end: date | None) -> tuple[datetime | None, datetime | None]:
    """Turn inclusive calendar dates into a half-open UTC ``[start, end)`` window."""
    lower = datetime.combine(start, time.min, tzinfo=timezone.utc) if start else None
    upper = (
        datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc)
        if end
        else None
    )
    return lower, upper
