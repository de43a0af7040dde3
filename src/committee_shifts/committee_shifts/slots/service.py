from __future__ import annotations

import calendar
import logging
from datetime import date, timedelta
from typing import Any, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..committees.repository import CommitteeRepository
from ..common.validators import parse_shift, require_int
from ..core.constants import UPCOMING_SLOT_DAYS
from ..core.enums import SHIFT_ORDER, ShiftKind
from ..core.exceptions import AuthorizationError, DuplicateSlotError, NotAMemberError, NotFoundError, ValidationError
from .model import Slot, SlotOverview
from .repository import SlotRepository

logger = logging.getLogger(__name__)


class SlotService:
    """Admin provisioning and member browsing of attendance slots."""

    def __init__(self, slots: SlotRepository, attendance: AttendanceRepository, committees: CommitteeRepository):
        self._slots = slots
        self._attendance = attendance
        self._committees = committees

    def create_slot(
        self,
        *,
        admin_user_id: int,
        committee_id: int,
        slot_date: date,
        shift: ShiftKind | str,
        max_capacity: Any = None,
        is_blocked: bool = False,
        notes: Optional[str] = None,
    ) -> Slot:
        if not self._committees.is_admin(admin_user_id, committee_id):
            raise AuthorizationError("Only admins can create attendance slots")

        committee = self._committees.get_committee(committee_id)
        if not committee:
            raise NotFoundError("Committee not found")

        capacity = committee.max_per_shift if max_capacity is None else require_int(max_capacity, "maxCapacity", minimum=0)
        try:
            slot = self._slots.create_slot(
                committee_id=int(committee_id),
                slot_date=slot_date,
                shift=parse_shift(shift),
                max_capacity=capacity,
                is_blocked=bool(is_blocked),
                notes=(notes or "").strip() or None,
            )
        except DuplicateSlotError:
            raise ValidationError("A slot already exists for this date and shift")

        logger.info("Admin %s created slot %s", admin_user_id, slot.slot_id)
        return slot

    def update_slot(
        self,
        *,
        admin_user_id: int,
        slot_id: int,
        max_capacity: Any = None,
        is_blocked: Optional[bool] = None,
        notes: Optional[str] = None,
    ) -> Slot:
        slot = self._slots.get_by_id(slot_id)
        if not slot:
            raise NotFoundError("Slot not found")
        if not self._committees.is_admin(admin_user_id, slot.committee_id):
            raise AuthorizationError("Only admins can update attendance slots")

        capacity = None if max_capacity is None else require_int(max_capacity, "maxCapacity", minimum=0)
        updated = self._slots.update_slot(
            slot.slot_id,
            max_capacity=capacity,
            is_blocked=None if is_blocked is None else bool(is_blocked),
            notes=notes,
        )
        if not updated:
            raise NotFoundError("Slot not found")

        logger.info(
            "Admin %s updated slot %s (capacity=%s blocked=%s)",
            admin_user_id,
            slot.slot_id,
            updated.max_capacity,
            updated.is_blocked,
        )
        return updated

    def list_month(self, *, user_id: int, committee_id: int, month: date) -> Sequence[SlotOverview]:
        if not self._committees.is_member(user_id, committee_id):
            raise NotAMemberError("Not authorized to view this committee's schedule")

        start = month.replace(day=1)
        end = month.replace(day=calendar.monthrange(month.year, month.month)[1])
        slots = self._slots.list_range(committee_id, start, end)
        counts = self._attendance.count_confirmed_by_slot([s.slot_id for s in slots])
        return [SlotOverview(slot=s, confirmed_count=int(counts.get(s.slot_id, 0))) for s in slots]

    def list_upcoming(self, *, user_id: int, today: date, days: int = UPCOMING_SLOT_DAYS) -> Sequence[SlotOverview]:
        committee_ids = list(self._committees.list_committee_ids_for_member(user_id))
        if not committee_ids:
            return []

        slots = self._slots.list_open_between(committee_ids, today, today + timedelta(days=days))
        counts = self._attendance.count_confirmed_by_slot([s.slot_id for s in slots])

        names: dict[int, str] = {}
        for cid in committee_ids:
            committee = self._committees.get_committee(cid)
            names[cid] = committee.name if committee else ""

        ordered = sorted(slots, key=lambda s: (s.slot_date, SHIFT_ORDER[s.shift], s.committee_id))
        return [
            SlotOverview(slot=s, confirmed_count=int(counts.get(s.slot_id, 0)), committee_name=names.get(s.committee_id))
            for s in ordered
        ]
