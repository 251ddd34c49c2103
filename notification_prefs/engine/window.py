"""
Do-Not-Disturb window evaluation.

Windows are UTC wall-clock ranges, start-inclusive and end-exclusive.
A window whose start is after its end wraps past midnight (22:00-07:00).
Anything the evaluator cannot make sense of counts as "not inside":
bad DND config must never block a notification.
"""

import re
from datetime import datetime, timezone
from typing import Optional

from notification_prefs.engine.models import DndWindow, TimeOfDay, MINUTES_PER_DAY

HHMM_RX = re.compile(r"([01][0-9]|2[0-3]):[0-5][0-9]")


def is_valid_time_str(value) -> bool:
    return isinstance(value, str) and HHMM_RX.fullmatch(value) is not None


def time_to_minutes(value: str) -> int:
    """'HH:MM' -> minutes since midnight. Raises ValueError on bad input."""
    if not is_valid_time_str(value):
        raise ValueError(f"invalid HH:MM time: {value!r}")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def parse_time_of_day(value: str) -> TimeOfDay:
    return TimeOfDay(time_to_minutes(value))


def minute_of_day(instant: datetime) -> int:
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc)
    return instant.hour * 60 + instant.minute


def _minutes(value) -> Optional[int]:
    if isinstance(value, TimeOfDay):
        value = value.minutes
    elif isinstance(value, str):
        return time_to_minutes(value) if is_valid_time_str(value) else None
    # bool is an int subclass; never a valid time
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if not 0 <= value < MINUTES_PER_DAY:
        return None
    return value


def is_within_window(window: Optional[DndWindow], instant: datetime) -> bool:
    if window is None:
        return False

    start = _minutes(getattr(window, "start", None))
    end = _minutes(getattr(window, "end", None))
    if start is None or end is None:
        return False

    # Equal bounds mean "no window", not "all day"
    if start == end:
        return False

    try:
        now = minute_of_day(instant)
    except (AttributeError, TypeError, ValueError, OverflowError):
        return False

    if start < end:
        return start <= now < end
    return now >= start or now < end
