"""Date manipulation utilities"""

from datetime import date, datetime
from typing import Union


def days_elapsed(since: Union[date, datetime], as_of: date) -> int:
    """Whole days from `since` to `as_of`, never negative"""
    if isinstance(since, datetime):
        since = since.date()
    return max((as_of - since).days, 0)


def is_past(day: date, as_of: date) -> bool:
    """True when `day` is strictly before the reference day"""
    return day < as_of
