"""Date and time utilities for the calendar engine.

Stored timestamps are naive wall-clock values. They only acquire a meaning
as instants once paired with the zone of the calendar that owns them.
"""

from datetime import date, datetime, timedelta
from typing import Union

import pytz
from pytz.tzinfo import BaseTzInfo

from .exceptions import InvalidRequestError, UnknownTimeZoneError

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M"
DATE_FORMAT = "%Y-%m-%d"

ZoneLike = Union[str, BaseTzInfo]


def resolve_timezone(zone: ZoneLike) -> BaseTzInfo:
    """
    Look up a time zone.

    Args:
        zone: IANA identifier (e.g. "America/New_York") or a pytz zone

    Returns:
        pytz time zone

    Raises:
        UnknownTimeZoneError: If the identifier is not known
    """
    if isinstance(zone, BaseTzInfo):
        return zone
    if not isinstance(zone, str) or not zone.strip():
        raise UnknownTimeZoneError(zone)
    try:
        return pytz.timezone(zone.strip())
    except pytz.UnknownTimeZoneError as e:
        raise UnknownTimeZoneError(zone) from e


def is_valid_timezone(zone: str) -> bool:
    try:
        resolve_timezone(zone)
    except UnknownTimeZoneError:
        return False
    return True


def convert_wall_clock(dt: datetime, from_zone: ZoneLike, to_zone: ZoneLike) -> datetime:
    """
    Reinterpret a wall-clock time from one zone as wall-clock time in another.

    The naive value is read as local time in ``from_zone``, converted to the
    instant it denotes, and that instant is expressed in ``to_zone``.

    Args:
        dt: Naive wall-clock datetime
        from_zone: Zone the value is currently expressed in
        to_zone: Zone to express the same instant in

    Returns:
        Naive wall-clock datetime in ``to_zone``
    """
    source = resolve_timezone(from_zone)
    target = resolve_timezone(to_zone)
    # Ambiguous/non-existent local times resolve to standard time.
    instant = source.localize(dt.replace(tzinfo=None), is_dst=False)
    return instant.astimezone(target).replace(tzinfo=None)


def convert_interval(
    start: datetime, end: datetime, from_zone: ZoneLike, to_zone: ZoneLike
) -> tuple[datetime, datetime]:
    """
    Re-zone an event interval, keeping ``end >= start``.

    Each bound is converted with ``convert_wall_clock``. A start inside a
    spring-forward gap lands on standard time while the end may not, which
    can invert the interval; the stored duration is kept in that case.

    Returns:
        ``(start, end)`` as naive wall-clock values in ``to_zone``
    """
    new_start = convert_wall_clock(start, from_zone, to_zone)
    new_end = convert_wall_clock(end, from_zone, to_zone)
    if new_end < new_start:
        new_end = new_start + (end - start)
    return new_start, new_end


def start_of_day(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, datetime.min.time())


def day_window(value: Union[date, datetime]) -> tuple[datetime, datetime]:
    """Return the half-open 24-hour window ``[00:00, next 00:00)`` of a day."""
    start = start_of_day(value)
    return start, start + timedelta(days=1)


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """
    Parse a ``YYYY-MM-DDTHH:MM`` timestamp.

    Raises:
        InvalidRequestError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise InvalidRequestError(f"Expected a timestamp, got {value!r}")
    text = value.strip()
    for fmt in (TIMESTAMP_FORMAT, "%Y-%m-%dT%H:%M:%S"):
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise InvalidRequestError(
        f"Invalid date format {value!r}. Expected: YYYY-MM-DDTHH:MM"
    )


def parse_date(value: Union[str, date]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), DATE_FORMAT).date()
    except ValueError as e:
        raise InvalidRequestError(
            f"Invalid date {value!r}. Expected: YYYY-MM-DD"
        ) from e


def format_timestamp(dt: datetime) -> str:
    return dt.strftime(TIMESTAMP_FORMAT)
