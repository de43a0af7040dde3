from __future__ import annotations

from datetime import date
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall
from .model import MemberActivity
from .repository import ActivityRepository


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_pending_for_user(self, user_id: int, *, since: date) -> Sequence[MemberActivity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT activity_id, committee_id, user_id, title, activity_date, start_time, is_completed
                FROM member_activities
                WHERE user_id=%s AND activity_date >= %s AND is_completed=0
                ORDER BY activity_date ASC, start_time ASC
                """,
                (int(user_id), since),
            )
            return [
                MemberActivity(
                    activity_id=int(r["activity_id"]),
                    committee_id=int(r["committee_id"]),
                    user_id=int(r["user_id"]),
                    title=r["title"],
                    activity_date=r["activity_date"],
                    start_time=r.get("start_time"),
                    is_completed=as_bool(r.get("is_completed")),
                )
                for r in fetchall(cur)
            ]
