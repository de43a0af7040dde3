from __future__ import annotations

from enum import Enum


class ShiftKind(str, Enum):
    """Named period of a committee's operating day."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    FULL_DAY = "full_day"


# full_day slots can only be provisioned by an admin, never booked directly.
BOOKABLE_SHIFTS = frozenset({ShiftKind.MORNING, ShiftKind.AFTERNOON})

SHIFT_ORDER = {ShiftKind.MORNING: 0, ShiftKind.AFTERNOON: 1, ShiftKind.FULL_DAY: 2}


class AttendanceStatus(str, Enum):
    """Reservation status stored in attendances.status."""

    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    ATTENDED = "attended"
    ABSENT = "absent"


class ReminderEventType(str, Enum):
    ATTENDANCE = "attendance"
    ACTIVITY = "activity"
