from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import DEFAULT_WORKING_DAYS
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CommitteeShiftConfig
from .repository import CommitteeRepository


class MySQLCommitteeRepository(CommitteeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def is_member(self, user_id: int, committee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS ok
                FROM committee_members
                WHERE user_id=%s AND committee_id=%s AND is_active=1
                """,
                (int(user_id), int(committee_id)),
            )
            return fetchone(cur) is not None

    def is_admin(self, user_id: int, committee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS ok
                FROM committee_members
                WHERE user_id=%s AND committee_id=%s AND is_active=1 AND is_admin=1
                """,
                (int(user_id), int(committee_id)),
            )
            return fetchone(cur) is not None

    def list_committee_ids_for_member(self, user_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT cm.committee_id
                FROM committee_members cm
                JOIN committees c ON c.committee_id = cm.committee_id
                WHERE cm.user_id=%s AND cm.is_active=1 AND c.is_active=1
                ORDER BY cm.committee_id
                """,
                (int(user_id),),
            )
            return [int(r["committee_id"]) for r in fetchall(cur)]

    def get_committee(self, committee_id: int) -> Optional[CommitteeShiftConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT committee_id, name, morning_start, morning_end, afternoon_start, afternoon_end,
                       max_per_shift, working_days
                FROM committees
                WHERE committee_id=%s
                """,
                (int(committee_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            days = tuple(d.strip() for d in (r.get("working_days") or "").split(",") if d.strip())
            return CommitteeShiftConfig(
                committee_id=int(r["committee_id"]),
                name=r["name"],
                morning_start=r["morning_start"],
                morning_end=r["morning_end"],
                afternoon_start=r["afternoon_start"],
                afternoon_end=r["afternoon_end"],
                max_per_shift=int(r["max_per_shift"]),
                working_days=days or DEFAULT_WORKING_DAYS,
            )
