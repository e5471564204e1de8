"""Time parsing and arithmetic for same-day booking intervals"""

from datetime import date, datetime, time
from typing import Union

from ...shared.validators import parse_time

MINUTES_PER_DAY = 24 * 60


def to_minutes(value: Union[str, time]) -> int:
    """Minutes since midnight for a time or HH:MM string"""
    t = parse_time(value)
    return t.hour * 60 + t.minute


def from_minutes(minutes: int) -> time:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"{minutes} minutes is outside a single day")
    return time(minutes // 60, minutes % 60)


def format_time(value: Union[str, time]) -> str:
    """Normalize to zero-padded 24h HH:MM (storage format)"""
    return parse_time(value).strftime("%H:%M")


def format_time_12h(value: Union[str, time]) -> str:
    """Display format, e.g. 09:30 -> 9:30 AM"""
    return parse_time(value).strftime("%I:%M %p").lstrip("0")


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open [start, end) overlap in minutes; touching intervals do not overlap"""
    return start_a < end_b and start_b < end_a


def combine(day: date, value: Union[str, time]) -> datetime:
    return datetime.combine(day, parse_time(value))

