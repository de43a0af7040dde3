from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..committees.repository import CommitteeRepository
from ..common.datetime_utils import now_local
from ..common.validators import parse_shift
from ..core.enums import BOOKABLE_SHIFTS, AttendanceStatus, ShiftKind
from ..core.exceptions import (
    AlreadyRegisteredError,
    AuthorizationError,
    CapacityExceededError,
    DomainError,
    DuplicateSlotError,
    InvalidShiftError,
    InvalidStateError,
    NotAMemberError,
    NotFoundError,
    NotOwnerError,
    SlotBlockedError,
)
from ..slots.model import Slot
from ..slots.repository import SlotRepository
from .model import Attendance, AttendanceWithSlot
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class BookingService:
    """Capacity allocator: books, cancels and administratively closes reservations."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        slots: SlotRepository,
        committees: CommitteeRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._slots = slots
        self._committees = committees
        self._clock = clock

    def _resolve_slot(self, committee_id: int, slot_date: date, shift: ShiftKind) -> Slot:
        slot = self._slots.get_slot(committee_id, slot_date, shift)
        if slot:
            return slot

        committee = self._committees.get_committee(committee_id)
        if not committee:
            raise NotFoundError("Committee not found")

        try:
            slot = self._slots.create_slot(
                committee_id=committee_id,
                slot_date=slot_date,
                shift=shift,
                max_capacity=committee.max_per_shift,
                is_blocked=False,
            )
            logger.info("Lazily created slot %s (committee=%s date=%s shift=%s)", slot.slot_id, committee_id, slot_date, shift.value)
            return slot
        except DuplicateSlotError:
            # Another booker created it between our lookup and insert.
            slot = self._slots.get_slot(committee_id, slot_date, shift)
            if not slot:
                raise
            return slot

    def book_attendance(
        self,
        *,
        user_id: int,
        committee_id: int,
        slot_date: date,
        shift: ShiftKind | str,
        now: Optional[datetime] = None,
    ) -> Attendance:
        try:
            shift_kind = parse_shift(shift)
            if shift_kind not in BOOKABLE_SHIFTS:
                raise InvalidShiftError("Invalid shift. Must be 'morning' or 'afternoon'")

            if not self._committees.is_member(user_id, committee_id):
                raise NotAMemberError("You must be a member of this committee")

            slot = self._resolve_slot(int(committee_id), slot_date, shift_kind)
            return self._book_locked(user_id, slot, now or self._clock())
        except DomainError as e:
            logger.info("Booking rejected user=%s committee=%s %s %s: %s", user_id, committee_id, slot_date, shift, e.code)
            raise

    def book_slot(self, *, user_id: int, slot_id: int, now: Optional[datetime] = None) -> Attendance:
        """Book an existing slot by id; any shift kind, full_day included."""

        try:
            slot = self._slots.get_by_id(slot_id)
            if not slot:
                raise NotFoundError("Slot not found")
            if not self._committees.is_member(user_id, slot.committee_id):
                raise NotAMemberError("You must be a member of this committee")

            return self._book_locked(user_id, slot, now or self._clock())
        except DomainError as e:
            logger.info("Booking rejected user=%s slot=%s: %s", user_id, slot_id, e.code)
            raise

    def _book_locked(self, user_id: int, slot: Slot, now: datetime) -> Attendance:
        with self._attendance.lock_slot(slot.slot_id) as ledger:
            current = ledger.slot
            if current.is_blocked:
                raise SlotBlockedError("This slot is blocked")

            existing = ledger.find_for_user(user_id)
            if existing and existing.status == AttendanceStatus.CONFIRMED:
                raise AlreadyRegisteredError("You are already registered for this shift")
            if existing and existing.status != AttendanceStatus.CANCELLED:
                raise InvalidStateError(f"Your attendance for this shift is already {existing.status.value}")

            if ledger.count_confirmed() >= current.max_capacity:
                raise CapacityExceededError("No spots available for this shift")

            if existing:
                attendance = ledger.reactivate(attendance_id=existing.attendance_id, registered_at=now)
            else:
                attendance = ledger.insert_confirmed(user_id=user_id, registered_at=now)

        logger.info(
            "Booked attendance %s user=%s slot=%s (%s %s)",
            attendance.attendance_id,
            user_id,
            slot.slot_id,
            slot.slot_date,
            slot.shift.value,
        )
        return attendance

    def cancel_attendance(self, *, attendance_id: int, requesting_user_id: int, now: Optional[datetime] = None) -> Attendance:
        attendance = self._attendance.get_by_id(attendance_id)
        if not attendance:
            raise NotFoundError("Attendance not found")
        if attendance.user_id != int(requesting_user_id):
            raise NotOwnerError("You can only cancel your own attendance")
        if attendance.status != AttendanceStatus.CONFIRMED:
            raise InvalidStateError("Only confirmed attendances can be cancelled")

        now = now or self._clock()
        if not self._attendance.transition(
            attendance_id=attendance.attendance_id,
            expected=AttendanceStatus.CONFIRMED,
            new_status=AttendanceStatus.CANCELLED,
            cancelled_at=now,
        ):
            raise InvalidStateError("Attendance changed state; reload and try again")

        logger.info("Cancelled attendance %s user=%s", attendance.attendance_id, requesting_user_id)
        return self._reload(attendance.attendance_id)

    def mark_absent(self, *, attendance_id: int, admin_user_id: int) -> Attendance:
        attendance = self._attendance.get_by_id(attendance_id)
        if not attendance:
            raise NotFoundError("Attendance not found")

        slot = self._slots.get_by_id(attendance.slot_id)
        if not slot:
            raise NotFoundError("Slot not found")
        if not self._committees.is_admin(admin_user_id, slot.committee_id):
            raise AuthorizationError("Only committee admins can mark absences")
        if attendance.status != AttendanceStatus.CONFIRMED:
            raise InvalidStateError("Only confirmed attendances can be marked absent")

        if not self._attendance.transition(
            attendance_id=attendance.attendance_id,
            expected=AttendanceStatus.CONFIRMED,
            new_status=AttendanceStatus.ABSENT,
        ):
            raise InvalidStateError("Attendance changed state; reload and try again")

        logger.info("Marked attendance %s absent (by admin %s)", attendance.attendance_id, admin_user_id)
        return self._reload(attendance.attendance_id)

    def list_user_attendances(self, user_id: int) -> Sequence[AttendanceWithSlot]:
        return self._attendance.list_for_user(user_id)

    def _reload(self, attendance_id: int) -> Attendance:
        attendance = self._attendance.get_by_id(attendance_id)
        if not attendance:
            raise NotFoundError("Attendance not found")
        return attendance
