from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, ShiftKind


@dataclass(frozen=True)
class Attendance:
    """One user's reservation against one slot."""

    attendance_id: int
    slot_id: int
    user_id: int
    status: AttendanceStatus
    registered_at: datetime
    cancelled_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceWithSlot:
    """Read-model: attendance joined with its slot and committee."""

    attendance: Attendance
    committee_id: int
    committee_name: str
    slot_date: date
    shift: ShiftKind


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for reports and the calendar feed: confirmed attendance + user identity."""

    attendance_id: int
    slot_date: date
    shift: ShiftKind
    user_id: int
    first_name: Optional[str]
    last_name: Optional[str]
    email: Optional[str]
    registered_at: datetime

    @property
    def full_name(self) -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or "Unknown user"
