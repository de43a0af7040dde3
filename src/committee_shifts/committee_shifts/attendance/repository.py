from __future__ import annotations

from datetime import date, datetime
from typing import ContextManager, Mapping, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from ..slots.model import Slot
from .model import Attendance, AttendanceReportRow, AttendanceWithSlot


class SlotLedger(Protocol):
    """Attendance operations scoped to one locked slot.

    Only valid inside AttendanceRepository.lock_slot(); every read and write goes
    through the same transaction, so the count and the write cannot interleave with
    another booker of the same slot.
    """

    slot: Slot

    def count_confirmed(self) -> int:
        raise NotImplementedError

    def find_for_user(self, user_id: int) -> Optional[Attendance]:
        raise NotImplementedError

    def insert_confirmed(self, *, user_id: int, registered_at: datetime) -> Attendance:
        raise NotImplementedError

    def reactivate(self, *, attendance_id: int, registered_at: datetime) -> Attendance:
        raise NotImplementedError


class AttendanceRepository(Protocol):
    def lock_slot(self, slot_id: int) -> ContextManager[SlotLedger]:
        """Open a transaction holding an exclusive lock on the slot row.

        Raises NotFoundError if the slot does not exist.
        """

        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[Attendance]:
        raise NotImplementedError

    def transition(
        self,
        *,
        attendance_id: int,
        expected: AttendanceStatus,
        new_status: AttendanceStatus,
        cancelled_at: Optional[datetime] = None,
    ) -> bool:
        """Compare-and-set status change. False when the row was not in `expected`."""

        raise NotImplementedError

    def list_for_user(self, user_id: int, *, since: Optional[date] = None) -> Sequence[AttendanceWithSlot]:
        raise NotImplementedError

    def count_confirmed_by_slot(self, slot_ids: Sequence[int]) -> Mapping[int, int]:
        raise NotImplementedError

    def list_confirmed_in_range(self, *, committee_id: int, start_date: date, end_date: date) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
