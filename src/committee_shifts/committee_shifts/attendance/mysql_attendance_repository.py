from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence

from ..core.enums import AttendanceStatus, ShiftKind
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone
from ..slots.model import Slot
from ..slots.mysql_slot_repository import SLOT_COLUMNS, row_to_slot
from .model import Attendance, AttendanceReportRow, AttendanceWithSlot
from .repository import AttendanceRepository, SlotLedger

ATTENDANCE_COLUMNS = "attendance_id, slot_id, user_id, status, registered_at, cancelled_at"


def row_to_attendance(r: Dict[str, Any]) -> Attendance:
    return Attendance(
        attendance_id=int(r["attendance_id"]),
        slot_id=int(r["slot_id"]),
        user_id=int(r["user_id"]),
        status=AttendanceStatus(r["status"]),
        registered_at=r["registered_at"],
        cancelled_at=r.get("cancelled_at"),
    )


class MySQLSlotLedger(SlotLedger):
    def __init__(self, cur, slot: Slot):
        self._cur = cur
        self.slot = slot

    def count_confirmed(self) -> int:
        self._cur.execute(
            "SELECT COUNT(*) AS n FROM attendances WHERE slot_id=%s AND status=%s",
            (self.slot.slot_id, AttendanceStatus.CONFIRMED.value),
        )
        r = fetchone(self._cur)
        return int(r["n"]) if r else 0

    def find_for_user(self, user_id: int) -> Optional[Attendance]:
        self._cur.execute(
            f"SELECT {ATTENDANCE_COLUMNS} FROM attendances WHERE slot_id=%s AND user_id=%s",
            (self.slot.slot_id, int(user_id)),
        )
        r = fetchone(self._cur)
        return row_to_attendance(r) if r else None

    def insert_confirmed(self, *, user_id: int, registered_at: datetime) -> Attendance:
        self._cur.execute(
            """
            INSERT INTO attendances(slot_id, user_id, status, registered_at)
            VALUES(%s,%s,%s,%s)
            """,
            (self.slot.slot_id, int(user_id), AttendanceStatus.CONFIRMED.value, registered_at),
        )
        return Attendance(
            attendance_id=int(self._cur.lastrowid),
            slot_id=self.slot.slot_id,
            user_id=int(user_id),
            status=AttendanceStatus.CONFIRMED,
            registered_at=registered_at,
            cancelled_at=None,
        )

    def reactivate(self, *, attendance_id: int, registered_at: datetime) -> Attendance:
        self._cur.execute(
            """
            UPDATE attendances
            SET status=%s, registered_at=%s, cancelled_at=NULL
            WHERE attendance_id=%s AND slot_id=%s
            """,
            (AttendanceStatus.CONFIRMED.value, registered_at, int(attendance_id), self.slot.slot_id),
        )
        self._cur.execute(f"SELECT {ATTENDANCE_COLUMNS} FROM attendances WHERE attendance_id=%s", (int(attendance_id),))
        r = fetchone(self._cur)
        if not r:
            raise NotFoundError("Attendance not found")
        return row_to_attendance(r)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def lock_slot(self, slot_id: int) -> Iterator[SlotLedger]:
        # READ COMMITTED so the count after acquiring the lock sees rows committed by
        # the previous lock holder.
        with db_transaction(self._conn_factory, isolation_level="READ COMMITTED") as (_, cur):
            cur.execute(f"SELECT {SLOT_COLUMNS} FROM attendance_slots WHERE slot_id=%s FOR UPDATE", (int(slot_id),))
            r = fetchone(cur)
            if not r:
                raise NotFoundError("Slot not found")
            yield MySQLSlotLedger(cur, row_to_slot(r))

    def get_by_id(self, attendance_id: int) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {ATTENDANCE_COLUMNS} FROM attendances WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return row_to_attendance(r) if r else None

    def transition(
        self,
        *,
        attendance_id: int,
        expected: AttendanceStatus,
        new_status: AttendanceStatus,
        cancelled_at: Optional[datetime] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendances
                SET status=%s, cancelled_at=%s
                WHERE attendance_id=%s AND status=%s
                """,
                (new_status.value, cancelled_at, int(attendance_id), expected.value),
            )
            return cur.rowcount > 0

    def list_for_user(self, user_id: int, *, since: Optional[date] = None) -> Sequence[AttendanceWithSlot]:
        clauses = ["a.user_id=%s"]
        params: list[object] = [int(user_id)]
        if since is not None:
            clauses.append("s.slot_date >= %s")
            params.append(since)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    a.attendance_id, a.slot_id, a.user_id, a.status, a.registered_at, a.cancelled_at,
                    s.committee_id, s.slot_date, s.shift,
                    c.name AS committee_name
                FROM attendances a
                JOIN attendance_slots s ON s.slot_id = a.slot_id
                JOIN committees c ON c.committee_id = s.committee_id
                WHERE {" AND ".join(clauses)}
                ORDER BY s.slot_date DESC, FIELD(s.shift, 'morning', 'afternoon', 'full_day')
                """,
                tuple(params),
            )
            return [
                AttendanceWithSlot(
                    attendance=row_to_attendance(r),
                    committee_id=int(r["committee_id"]),
                    committee_name=r["committee_name"],
                    slot_date=r["slot_date"],
                    shift=ShiftKind(r["shift"]),
                )
                for r in fetchall(cur)
            ]

    def count_confirmed_by_slot(self, slot_ids: Sequence[int]) -> Mapping[int, int]:
        ids = [int(s) for s in slot_ids]
        if not ids:
            return {}

        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT slot_id, COUNT(*) AS n
                FROM attendances
                WHERE slot_id IN ({placeholders}) AND status=%s
                GROUP BY slot_id
                """,
                (*ids, AttendanceStatus.CONFIRMED.value),
            )
            return {int(r["slot_id"]): int(r["n"]) for r in fetchall(cur)}

    def list_confirmed_in_range(self, *, committee_id: int, start_date: date, end_date: date) -> Sequence[AttendanceReportRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    a.attendance_id, a.user_id, a.registered_at,
                    s.slot_date, s.shift,
                    u.first_name, u.last_name, u.email
                FROM attendances a
                JOIN attendance_slots s ON s.slot_id = a.slot_id
                LEFT JOIN users u ON u.user_id = a.user_id
                WHERE s.committee_id=%s
                  AND s.slot_date BETWEEN %s AND %s
                  AND a.status=%s
                ORDER BY s.slot_date ASC, FIELD(s.shift, 'morning', 'afternoon', 'full_day'), a.registered_at ASC
                """,
                (int(committee_id), start_date, end_date, AttendanceStatus.CONFIRMED.value),
            )
            return [
                AttendanceReportRow(
                    attendance_id=int(r["attendance_id"]),
                    slot_date=r["slot_date"],
                    shift=ShiftKind(r["shift"]),
                    user_id=int(r["user_id"]),
                    first_name=r.get("first_name"),
                    last_name=r.get("last_name"),
                    email=r.get("email"),
                    registered_at=r["registered_at"],
                )
                for r in fetchall(cur)
            ]
