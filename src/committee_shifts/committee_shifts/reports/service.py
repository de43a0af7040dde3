from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence

from ..attendance.model import AttendanceReportRow
from ..attendance.repository import AttendanceRepository
from ..committees.repository import MembershipOracle
from ..core.enums import SHIFT_ORDER
from ..core.exceptions import AuthorizationError, NotAMemberError, ValidationError


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


class AttendanceReportService:
    def __init__(self, attendance: AttendanceRepository, membership: MembershipOracle):
        self._attendance = attendance
        self._membership = membership

    def _rows(self, *, committee_id: int, start: date, end: date) -> Sequence[AttendanceReportRow]:
        if start > end:
            raise ValidationError("startDate must be on or before endDate")

        rows = self._attendance.list_confirmed_in_range(committee_id=committee_id, start_date=start, end_date=end)
        return sorted(rows, key=lambda r: (r.slot_date, SHIFT_ORDER[r.shift], r.registered_at))

    def build_report(self, *, admin_user_id: int, committee_id: int, start: date, end: date) -> ReportData:
        if not self._membership.is_admin(admin_user_id, committee_id):
            raise AuthorizationError("Only admins can view attendance reports")

        out_rows: list[dict] = []
        summary_map: dict[int, dict] = {}

        for r in self._rows(committee_id=committee_id, start=start, end=end):
            out_rows.append(
                {
                    "id": r.attendance_id,
                    "date": r.slot_date.strftime("%Y-%m-%d"),
                    "shift": r.shift.value,
                    "userId": r.user_id,
                    "userName": r.full_name,
                    "userEmail": r.email or "",
                    "registeredAt": r.registered_at.isoformat(timespec="seconds"),
                }
            )

            s = summary_map.get(r.user_id)
            if not s:
                s = {"userId": r.user_id, "userName": r.full_name, "userEmail": r.email or "", "shifts": 0}
                summary_map[r.user_id] = s
            s["shifts"] += 1

        summary = sorted(summary_map.values(), key=lambda x: (-x["shifts"], x["userName"]))
        return ReportData(rows=out_rows, summary=summary)

    def calendar(self, *, user_id: int, committee_id: int, start: date, end: date) -> list[dict]:
        if not self._membership.is_member(user_id, committee_id):
            raise NotAMemberError("You must be a member of this committee")

        return [
            {
                "id": r.attendance_id,
                "date": r.slot_date.strftime("%Y-%m-%d"),
                "shift": r.shift.value,
                "userId": r.user_id,
                "userName": r.full_name,
                "registeredAt": r.registered_at.isoformat(timespec="seconds"),
            }
            for r in self._rows(committee_id=committee_id, start=start, end=end)
        ]
