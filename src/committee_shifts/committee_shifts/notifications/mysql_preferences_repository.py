from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import NotificationPreferences
from .repository import PreferencesRepository

logger = logging.getLogger(__name__)

PREFS_COLUMNS = (
    "user_id, push_enabled, push_subscription, shift_reminders, activity_reminders, reminder_minutes_before"
)


def _load_subscription(raw: Optional[str], user_id: int) -> Optional[dict[str, Any]]:
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring malformed push subscription for user %s", user_id)
        return None
    return value if isinstance(value, dict) else None


def row_to_prefs(r: Dict[str, Any]) -> NotificationPreferences:
    user_id = int(r["user_id"])
    return NotificationPreferences(
        user_id=user_id,
        push_enabled=as_bool(r.get("push_enabled")),
        push_subscription=_load_subscription(r.get("push_subscription"), user_id),
        shift_reminders=as_bool(r.get("shift_reminders")),
        activity_reminders=as_bool(r.get("activity_reminders")),
        reminder_minutes_before=int(r.get("reminder_minutes_before") or 0),
    )


class MySQLPreferencesRepository(PreferencesRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, user_id: int) -> Optional[NotificationPreferences]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {PREFS_COLUMNS} FROM notification_preferences WHERE user_id=%s", (int(user_id),))
            r = fetchone(cur)
            return row_to_prefs(r) if r else None

    def upsert(self, prefs: NotificationPreferences) -> NotificationPreferences:
        subscription = json.dumps(prefs.push_subscription) if prefs.push_subscription else None
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notification_preferences(
                    user_id, push_enabled, push_subscription, shift_reminders, activity_reminders, reminder_minutes_before
                )
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    push_enabled=VALUES(push_enabled),
                    push_subscription=VALUES(push_subscription),
                    shift_reminders=VALUES(shift_reminders),
                    activity_reminders=VALUES(activity_reminders),
                    reminder_minutes_before=VALUES(reminder_minutes_before)
                """,
                (
                    int(prefs.user_id),
                    int(prefs.push_enabled),
                    subscription,
                    int(prefs.shift_reminders),
                    int(prefs.activity_reminders),
                    int(prefs.reminder_minutes_before),
                ),
            )
        return prefs

    def list_push_enabled(self) -> Sequence[NotificationPreferences]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {PREFS_COLUMNS}
                FROM notification_preferences
                WHERE push_enabled=1 AND push_subscription IS NOT NULL
                ORDER BY user_id
                """
            )
            return [p for p in (row_to_prefs(r) for r in fetchall(cur)) if p.can_push]
