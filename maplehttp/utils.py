from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Union

from .errors import InvalidArgumentError

DateLike = Union[datetime, int, float, str]


def to_datetime(date: DateLike) -> datetime:
    """
    Coerce a datetime, UNIX timestamp or date string to an aware UTC datetime.

    Strings may be RFC 2822 (``Sat, 26 Jul 1997 05:00:00 GMT``) or ISO-8601.
    Naive values are taken to be UTC.
    """
    if isinstance(date, datetime):
        dt = date
    elif isinstance(date, (int, float)):
        dt = datetime.fromtimestamp(date, tz=timezone.utc)
    elif isinstance(date, str):
        try:
            dt = parsedate_to_datetime(date)
        except (TypeError, ValueError):
            try:
                dt = datetime.fromisoformat(date)
            except ValueError as exc:
                raise InvalidArgumentError(f"Could not parse date: {date!r}") from exc
    else:
        raise InvalidArgumentError(f"Unsupported date value: {date!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def http_date(date: DateLike) -> str:
    """Format a date as an IMF-fixdate, e.g. ``Sat, 26 Jul 1997 05:00:00 GMT``."""
    return format_datetime(to_datetime(date), usegmt=True)
