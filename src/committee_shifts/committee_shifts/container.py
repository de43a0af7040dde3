from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from functools import partial
from typing import Callable, Optional

from .activities.mysql_activity_repository import MySQLActivityRepository
from .activities.repository import ActivityRepository
from .attendance.confirmation import ConfirmationGate
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import BookingService
from .committees.mysql_committee_repository import MySQLCommitteeRepository
from .committees.repository import CommitteeRepository
from .common.datetime_utils import now_local
from .core.constants import DEDUP_TTL_SECONDS, REMINDER_TOLERANCE_SECONDS
from .database.connection import DatabaseConnection, DBConfig
from .notifications.dedup import SentNotificationCache
from .notifications.matcher import NotificationMatcher
from .notifications.mysql_preferences_repository import MySQLPreferencesRepository
from .notifications.push import PushSender, WebPushSender
from .notifications.repository import PreferencesRepository
from .notifications.service import NotificationPreferencesService
from .reports.service import AttendanceReportService
from .slots.mysql_slot_repository import MySQLSlotRepository
from .slots.repository import SlotRepository
from .slots.service import SlotService


@dataclass(frozen=True)
class Container:
    clock: Callable[[], datetime]

    committees_repo: CommitteeRepository
    slots_repo: SlotRepository
    attendance_repo: AttendanceRepository
    activities_repo: ActivityRepository
    preferences_repo: PreferencesRepository
    push_sender: PushSender

    booking_service: BookingService
    confirmation_gate: ConfirmationGate
    slot_service: SlotService
    report_service: AttendanceReportService
    preferences_service: NotificationPreferencesService
    matcher: NotificationMatcher

    conn: Optional[DatabaseConnection] = None


def assemble(
    *,
    committees: CommitteeRepository,
    slots: SlotRepository,
    attendance: AttendanceRepository,
    activities: ActivityRepository,
    preferences: PreferencesRepository,
    sender: PushSender,
    clock: Callable[[], datetime] = now_local,
    reminder_tolerance_seconds: int = REMINDER_TOLERANCE_SECONDS,
    dedup_ttl_seconds: int = DEDUP_TTL_SECONDS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of whatever repositories the caller provides."""

    matcher = NotificationMatcher(
        preferences,
        attendance,
        committees,
        activities,
        sender,
        cache=SentNotificationCache(ttl_seconds=dedup_ttl_seconds, clock=clock),
        clock=clock,
        tolerance_seconds=reminder_tolerance_seconds,
    )

    return Container(
        clock=clock,
        committees_repo=committees,
        slots_repo=slots,
        attendance_repo=attendance,
        activities_repo=activities,
        preferences_repo=preferences,
        push_sender=sender,
        booking_service=BookingService(attendance, slots, committees, clock=clock),
        confirmation_gate=ConfirmationGate(attendance, slots, committees, clock=clock),
        slot_service=SlotService(slots, attendance, committees),
        report_service=AttendanceReportService(attendance, committees),
        preferences_service=NotificationPreferencesService(preferences, sender),
        matcher=matcher,
        conn=conn,
    )


def build_container(*, db_config: dict, settings: object = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    sender = WebPushSender(
        vapid_private_key=str(getattr(settings, "VAPID_PRIVATE_KEY", "") or ""),
        vapid_subject=str(getattr(settings, "VAPID_SUBJECT", "mailto:admin@example.org")),
    )

    return assemble(
        committees=MySQLCommitteeRepository(conn),
        slots=MySQLSlotRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        activities=MySQLActivityRepository(conn),
        preferences=MySQLPreferencesRepository(conn),
        sender=sender,
        clock=partial(now_local, getattr(settings, "ORG_TIMEZONE", None) or None),
        reminder_tolerance_seconds=int(getattr(settings, "REMINDER_TOLERANCE_SECONDS", REMINDER_TOLERANCE_SECONDS)),
        dedup_ttl_seconds=int(getattr(settings, "DEDUP_TTL_SECONDS", DEDUP_TTL_SECONDS)),
        conn=conn,
    )
