"""Timestamp helpers: every instant in the core is a timezone-aware UTC datetime."""
from datetime import date, datetime, time, timezone
from typing import Optional, Union


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[Union[date, datetime]]) -> Optional[datetime]:
    '''Normalizes a date/datetime to an aware UTC datetime (naive values are taken as UTC).'''
    if value is None:
        return None
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_epoch(value: Optional[datetime]) -> Optional[int]:
    if value is None:
        return None
    return int(as_utc(value).timestamp())


def from_epoch(seconds: Optional[int]) -> Optional[datetime]:
    if seconds is None:
        return None
    return datetime.fromtimestamp(int(seconds), tz=timezone.utc)
