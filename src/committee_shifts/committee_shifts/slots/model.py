from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ShiftKind


@dataclass(frozen=True)
class Slot:
    """One bookable shift on one date for one committee."""

    slot_id: int
    committee_id: int
    slot_date: date
    shift: ShiftKind
    max_capacity: int
    is_blocked: bool = False
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class SlotOverview:
    """Read-model for the month view: slot plus current occupancy."""

    slot: Slot
    confirmed_count: int
    committee_name: Optional[str] = None

    @property
    def available(self) -> int:
        return max(self.slot.max_capacity - self.confirmed_count, 0)
