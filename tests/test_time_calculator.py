from datetime import date, datetime, time

import pytest

from studio_booking.domain.scheduling.time_calculator import (
    combine,
    format_time,
    format_time_12h,
    from_minutes,
    intervals_overlap,
    to_minutes,
)


def test_to_minutes_and_back():
    assert to_minutes("09:30") == 570
    assert from_minutes(570) == time(9, 30)


def test_from_minutes_rejects_values_outside_the_day():
    with pytest.raises(ValueError):
        from_minutes(24 * 60)
    with pytest.raises(ValueError):
        from_minutes(-1)


def test_formatting():
    assert format_time("9:05") == "09:05"
    assert format_time_12h("09:00") == "9:00 AM"
    assert format_time_12h("13:30") == "1:30 PM"


def test_rejects_malformed_times():
    for value in ("25:00", "9am", "", "12:60"):
        with pytest.raises(ValueError):
            to_minutes(value)


def test_half_open_overlap():
    assert intervals_overlap(540, 600, 570, 630)
    assert not intervals_overlap(540, 600, 600, 660)


def test_combine():
    assert combine(date(2030, 6, 10), "14:15") == datetime(2030, 6, 10, 14, 15)
