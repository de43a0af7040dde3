from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import ShiftKind
from ..core.exceptions import DuplicateSlotError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Slot
from .repository import SlotRepository

SLOT_COLUMNS = "slot_id, committee_id, slot_date, shift, max_capacity, is_blocked, notes, created_at"


def row_to_slot(r: Dict[str, Any]) -> Slot:
    return Slot(
        slot_id=int(r["slot_id"]),
        committee_id=int(r["committee_id"]),
        slot_date=r["slot_date"],
        shift=ShiftKind(r["shift"]),
        max_capacity=int(r["max_capacity"]),
        is_blocked=as_bool(r.get("is_blocked")),
        notes=r.get("notes"),
        created_at=r.get("created_at"),
    )


class MySQLSlotRepository(SlotRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_slot(self, committee_id: int, slot_date: date, shift: ShiftKind) -> Optional[Slot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {SLOT_COLUMNS}
                FROM attendance_slots
                WHERE committee_id=%s AND slot_date=%s AND shift=%s
                """,
                (int(committee_id), slot_date, ShiftKind(shift).value),
            )
            r = fetchone(cur)
            return row_to_slot(r) if r else None

    def get_by_id(self, slot_id: int) -> Optional[Slot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {SLOT_COLUMNS} FROM attendance_slots WHERE slot_id=%s", (int(slot_id),))
            r = fetchone(cur)
            return row_to_slot(r) if r else None

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_slots(committee_id, slot_date, shift, max_capacity, is_blocked, notes)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (int(committee_id), slot_date, ShiftKind(shift).value, int(max_capacity), int(bool(is_blocked)), notes),
                )
                slot_id = int(cur.lastrowid)
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateSlotError(
                    f"Slot already exists for committee {committee_id} on {slot_date} ({ShiftKind(shift).value})"
                ) from e
            raise

        slot = self.get_by_id(slot_id)
        if slot is None:
            raise RuntimeError(f"Slot {slot_id} vanished after insert")
        return slot

    def update_slot(
        self,
        slot_id: int,
        *,
        max_capacity: Optional[int] = None,
        is_blocked: Optional[bool] = None,
        notes: Optional[str] = None,
    ) -> Optional[Slot]:
        sets: list[str] = []
        params: list[object] = []
        if max_capacity is not None:
            sets.append("max_capacity=%s")
            params.append(int(max_capacity))
        if is_blocked is not None:
            sets.append("is_blocked=%s")
            params.append(int(bool(is_blocked)))
        if notes is not None:
            sets.append("notes=%s")
            params.append(notes)

        if sets:
            params.append(int(slot_id))
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE attendance_slots SET {', '.join(sets)} WHERE slot_id=%s", tuple(params))

        return self.get_by_id(slot_id)

    def list_range(self, committee_id: int, start: date, end: date) -> Sequence[Slot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {SLOT_COLUMNS}
                FROM attendance_slots
                WHERE committee_id=%s AND slot_date BETWEEN %s AND %s
                ORDER BY slot_date ASC, FIELD(shift, 'morning', 'afternoon', 'full_day')
                """,
                (int(committee_id), start, end),
            )
            return [row_to_slot(r) for r in fetchall(cur)]

    def list_open_between(self, committee_ids: Sequence[int], start: date, end: date) -> Sequence[Slot]:
        ids = [int(c) for c in committee_ids]
        if not ids:
            return []

        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {SLOT_COLUMNS}
                FROM attendance_slots
                WHERE committee_id IN ({placeholders})
                  AND slot_date BETWEEN %s AND %s
                  AND is_blocked=0
                ORDER BY slot_date ASC, FIELD(shift, 'morning', 'afternoon', 'full_day'), committee_id ASC
                """,
                (*ids, start, end),
            )
            return [row_to_slot(r) for r in fetchall(cur)]
