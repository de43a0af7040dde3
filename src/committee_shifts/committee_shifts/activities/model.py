from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import parse_hhmm
from ..core.constants import DEFAULT_ACTIVITY_START


@dataclass(frozen=True)
class MemberActivity:
    activity_id: int
    committee_id: int
    user_id: int
    title: str
    activity_date: date
    start_time: Optional[str] = None
    is_completed: bool = False

    def starts_at(self) -> datetime:
        return datetime.combine(self.activity_date, parse_hhmm(self.start_time or DEFAULT_ACTIVITY_START))
