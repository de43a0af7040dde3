from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from ..common.datetime_utils import hhmm_to_minutes, parse_hhmm
from ..core.constants import (
    DEFAULT_AFTERNOON_END,
    DEFAULT_AFTERNOON_START,
    DEFAULT_MAX_PER_SHIFT,
    DEFAULT_MORNING_END,
    DEFAULT_MORNING_START,
    DEFAULT_WORKING_DAYS,
)
from ..core.enums import ShiftKind


@dataclass(frozen=True)
class CommitteeShiftConfig:
    """Shift configuration of one committee (read-only for this service)."""

    committee_id: int
    name: str
    morning_start: str = DEFAULT_MORNING_START
    morning_end: str = DEFAULT_MORNING_END
    afternoon_start: str = DEFAULT_AFTERNOON_START
    afternoon_end: str = DEFAULT_AFTERNOON_END
    max_per_shift: int = DEFAULT_MAX_PER_SHIFT
    working_days: tuple[str, ...] = DEFAULT_WORKING_DAYS

    def shift_bounds(self, shift: ShiftKind) -> tuple[str, str]:
        if shift == ShiftKind.MORNING:
            return self.morning_start or DEFAULT_MORNING_START, self.morning_end or DEFAULT_MORNING_END
        if shift == ShiftKind.AFTERNOON:
            return self.afternoon_start or DEFAULT_AFTERNOON_START, self.afternoon_end or DEFAULT_AFTERNOON_END
        return self.morning_start or DEFAULT_MORNING_START, self.afternoon_end or DEFAULT_AFTERNOON_END

    def shift_window(self, shift: ShiftKind) -> tuple[int, int]:
        """Inclusive [start, end] window in minutes since midnight."""
        start, end = self.shift_bounds(shift)
        return hhmm_to_minutes(start), hhmm_to_minutes(end)

    def shift_start(self, shift: ShiftKind) -> time:
        return parse_hhmm(self.shift_bounds(shift)[0])
