from datetime import datetime, timedelta, timezone

import pytest

from conftest import utc
from notification_prefs.engine.models import DndWindow, TimeOfDay
from notification_prefs.engine.window import (
    is_valid_time_str, is_within_window, minute_of_day, time_to_minutes,
)


def window(start, end):
    return DndWindow(TimeOfDay(time_to_minutes(start)), TimeOfDay(time_to_minutes(end)))


def every_minute():
    for m in range(1440):
        yield m, utc(m // 60, m % 60)


class TestTimeParsing:

    @pytest.mark.parametrize("value,expected", [
        ("00:00", 0), ("07:00", 420), ("22:00", 1320), ("23:59", 1439), ("12:34", 754),
    ])
    def test_time_to_minutes(self, value, expected):
        assert time_to_minutes(value) == expected

    @pytest.mark.parametrize("value", ["7:00", "24:00", "12:60", "1200", "12:00 ", "", None, 700])
    def test_invalid_time_strings(self, value):
        assert not is_valid_time_str(value)
        with pytest.raises(ValueError):
            time_to_minutes(value)

    def test_time_of_day_renders_hhmm(self):
        assert TimeOfDay(420).hhmm == "07:00"
        assert str(TimeOfDay(1439)) == "23:59"


def test_absent_window_is_never_active():
    assert is_within_window(None, utc(23, 0)) is False


@pytest.mark.parametrize("hhmm", ["00:00", "10:00", "23:59"])
def test_equal_bounds_never_active(hhmm):
    w = window(hhmm, hhmm)
    assert not any(is_within_window(w, instant) for _, instant in every_minute())


@pytest.mark.parametrize("start,end", [("09:00", "17:00"), ("00:00", "00:01"), ("00:00", "23:59")])
def test_same_day_window_membership(start, end):
    w = window(start, end)
    s, e = time_to_minutes(start), time_to_minutes(end)
    for m, instant in every_minute():
        assert is_within_window(w, instant) == (s <= m < e), m


@pytest.mark.parametrize("start,end", [("22:00", "07:00"), ("23:59", "00:00"), ("12:00", "11:59")])
def test_wrapping_window_membership(start, end):
    w = window(start, end)
    s, e = time_to_minutes(start), time_to_minutes(end)
    for m, instant in every_minute():
        assert is_within_window(w, instant) == (m >= s or m < e), m


@pytest.mark.parametrize("hour,minute,expected", [
    (22, 0, True),
    (7, 0, False),
    (23, 30, True),
    (2, 0, True),
    (21, 0, False),
    (8, 0, False),
    (6, 59, True),
    (21, 59, False),
])
def test_overnight_window_examples(hour, minute, expected):
    assert is_within_window(window("22:00", "07:00"), utc(hour, minute)) is expected


def test_same_day_boundaries():
    w = window("09:00", "17:00")
    assert is_within_window(w, utc(9, 0)) is True
    assert is_within_window(w, utc(17, 0)) is False
    assert is_within_window(w, utc(8, 59)) is False


def test_seconds_and_date_are_ignored():
    w = window("22:00", "07:00")
    assert is_within_window(w, utc(6, 59, 59)) is True
    assert is_within_window(w, datetime(2025, 7, 29, 6, 59, 59, 999999, tzinfo=timezone.utc)) is True
    assert is_within_window(w, datetime(1999, 1, 1, 23, 0, tzinfo=timezone.utc)) is True


def test_non_utc_instant_is_converted_to_utc():
    plus_three = timezone(timedelta(hours=3))
    # 01:30 at +03:00 is 22:30 UTC
    instant = datetime(2025, 7, 29, 1, 30, tzinfo=plus_three)
    assert minute_of_day(instant) == 22 * 60 + 30
    assert is_within_window(window("22:00", "07:00"), instant) is True
    assert is_within_window(window("00:00", "02:00"), instant) is False


class TestMalformedWindows:
    """Bad DND data must never suppress a notification."""

    @pytest.mark.parametrize("start,end", [
        (TimeOfDay(-1), TimeOfDay(420)),
        (TimeOfDay(1320), TimeOfDay(1440)),
        (TimeOfDay(True), TimeOfDay(420)),
        ("7:00", "08:00"),
        ("07:00", "24:00"),
        (None, TimeOfDay(420)),
        (1.5, 3.5),
    ])
    def test_malformed_bounds_are_inactive(self, start, end):
        w = DndWindow(start, end)
        assert not any(is_within_window(w, instant) for _, instant in every_minute())

    def test_object_without_bounds(self):
        assert is_within_window(object(), utc(23, 0)) is False
        assert is_within_window({"start": "22:00", "end": "07:00"}, utc(23, 0)) is False

    def test_bad_instant(self):
        assert is_within_window(window("22:00", "07:00"), "2025-07-28T23:00:00Z") is False
        assert is_within_window(window("22:00", "07:00"), None) is False

    def test_valid_text_bounds_still_evaluated(self):
        w = DndWindow("22:00", "07:00")
        assert is_within_window(w, utc(23, 0)) is True
        assert is_within_window(w, utc(12, 0)) is False
