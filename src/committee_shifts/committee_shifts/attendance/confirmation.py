from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from ..committees.repository import CommitteeConfigProvider
from ..common.datetime_utils import minute_of_day, now_local
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    InvalidStateError,
    NotFoundError,
    NotOwnerError,
    OutsideWindowError,
    WrongDayError,
)
from ..slots.repository import SlotRepository
from .model import Attendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class ConfirmationGate:
    """Upgrades confirmed -> attended, only on the slot's day and inside its shift window.

    The window comes from the committee's HH:MM strings and is inclusive at both ends.
    There is no way back from attended.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        slots: SlotRepository,
        committees: CommitteeConfigProvider,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._slots = slots
        self._committees = committees
        self._clock = clock

    def confirm_attendance(self, *, attendance_id: int, requesting_user_id: int, now: Optional[datetime] = None) -> Attendance:
        attendance = self._attendance.get_by_id(attendance_id)
        if not attendance:
            raise NotFoundError("Attendance not found")
        if attendance.user_id != int(requesting_user_id):
            raise NotOwnerError("You can only confirm your own attendance")
        if attendance.status != AttendanceStatus.CONFIRMED:
            raise InvalidStateError("Only scheduled attendances can be confirmed")

        slot = self._slots.get_by_id(attendance.slot_id)
        if not slot:
            raise NotFoundError("Slot not found")
        committee = self._committees.get_committee(slot.committee_id)
        if not committee:
            raise NotFoundError("Committee not found")

        now = now or self._clock()
        if slot.slot_date != now.date():
            raise WrongDayError("You can only confirm attendance on the scheduled day")

        start, end = committee.shift_window(slot.shift)
        current = minute_of_day(now)
        if current < start or current > end:
            label_start, label_end = committee.shift_bounds(slot.shift)
            raise OutsideWindowError(
                f"You can only confirm during the {slot.shift.value} shift ({label_start} - {label_end})"
            )

        if not self._attendance.transition(
            attendance_id=attendance.attendance_id,
            expected=AttendanceStatus.CONFIRMED,
            new_status=AttendanceStatus.ATTENDED,
        ):
            raise InvalidStateError("Only scheduled attendances can be confirmed")

        logger.info("Attendance %s confirmed as attended at %s", attendance.attendance_id, now.strftime("%H:%M"))
        updated = self._attendance.get_by_id(attendance.attendance_id)
        if not updated:
            raise NotFoundError("Attendance not found")
        return updated
