from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import ShiftKind
from .model import Slot


class SlotRepository(Protocol):
    def get_slot(self, committee_id: int, slot_date: date, shift: ShiftKind) -> Optional[Slot]:
        raise NotImplementedError

    def get_by_id(self, slot_id: int) -> Optional[Slot]:
        raise NotImplementedError

    def create_slot(
        self,
        *,
        committee_id: int,
        slot_date: date,
        shift: ShiftKind,
        max_capacity: int,
        is_blocked: bool = False,
        notes: Optional[str] = None,
    ) -> Slot:
        """Insert a slot.

        Raises DuplicateSlotError when (committee_id, slot_date, shift) already exists,
        including when a concurrent create won the race.
        """

        raise NotImplementedError

    def update_slot(
        self,
        slot_id: int,
        *,
        max_capacity: Optional[int] = None,
        is_blocked: Optional[bool] = None,
        notes: Optional[str] = None,
    ) -> Optional[Slot]:
        """Partial update; None leaves a field untouched. Returns the fresh row."""

        raise NotImplementedError

    def list_range(self, committee_id: int, start: date, end: date) -> Sequence[Slot]:
        raise NotImplementedError

    def list_open_between(self, committee_ids: Sequence[int], start: date, end: date) -> Sequence[Slot]:
        """Unblocked slots of the given committees, ordered by date."""

        raise NotImplementedError
