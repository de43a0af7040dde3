from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..activities.repository import ActivityRepository
from ..attendance.repository import AttendanceRepository
from ..committees.model import CommitteeShiftConfig
from ..committees.repository import CommitteeConfigProvider
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_REMINDER_MINUTES, REMINDER_TOLERANCE_SECONDS
from ..core.enums import AttendanceStatus, ReminderEventType
from .dedup import SentNotificationCache
from .model import NotificationPreferences, PushPayload, ReminderMatch
from .push import PushSender
from .repository import PreferencesRepository

logger = logging.getLogger(__name__)


class NotificationMatcher:
    """Once-a-minute sweep that pushes shift and activity reminders.

    For every push-enabled user an event matches when its start lies within
    +/- tolerance of now + the user's lead time. Each (user, event type, event id,
    lead time) is pushed at most once while it stays in the dedup cache.
    """

    def __init__(
        self,
        preferences: PreferencesRepository,
        attendance: AttendanceRepository,
        committees: CommitteeConfigProvider,
        activities: ActivityRepository,
        sender: PushSender,
        *,
        cache: Optional[SentNotificationCache] = None,
        clock: Callable[[], datetime] = now_local,
        tolerance_seconds: int = REMINDER_TOLERANCE_SECONDS,
    ):
        self._preferences = preferences
        self._attendance = attendance
        self._committees = committees
        self._activities = activities
        self._sender = sender
        self._clock = clock
        self._cache = cache or SentNotificationCache(clock=clock)
        self._tolerance = timedelta(seconds=int(tolerance_seconds))

    @property
    def cache(self) -> SentNotificationCache:
        return self._cache

    def window(self, now: datetime, reminder_minutes: int) -> tuple[datetime, datetime]:
        target = now + timedelta(minutes=reminder_minutes)
        return target - self._tolerance, target + self._tolerance

    def run_sweep(self, now: Optional[datetime] = None) -> int:
        now = now or self._clock()
        committees: dict[int, Optional[CommitteeShiftConfig]] = {}
        sent = 0

        for prefs in self._preferences.list_push_enabled():
            if not prefs.can_push:
                continue
            try:
                sent += self._notify_user(prefs, now, committees)
            except Exception:
                # One broken subscription or row must not starve everyone else.
                logger.exception("Reminder sweep failed for user %s", prefs.user_id)

        if sent:
            logger.info("Reminder sweep at %s sent %s notification(s)", now.strftime("%Y-%m-%d %H:%M"), sent)
        else:
            logger.debug("Reminder sweep at %s: nothing due", now.strftime("%Y-%m-%d %H:%M"))
        return sent

    def purge(self) -> int:
        removed = self._cache.purge()
        if removed:
            logger.debug("Purged %s reminder dedup entries", removed)
        return removed

    def _notify_user(
        self,
        prefs: NotificationPreferences,
        now: datetime,
        committees: dict[int, Optional[CommitteeShiftConfig]],
    ) -> int:
        minutes = prefs.reminder_minutes_before or DEFAULT_REMINDER_MINUTES
        matches: list[ReminderMatch] = []
        if prefs.shift_reminders:
            matches.extend(self.match_attendances(prefs.user_id, now, minutes, committees))
        if prefs.activity_reminders:
            matches.extend(self.match_activities(prefs.user_id, now, minutes))

        sent = 0
        for match in matches:
            key = (prefs.user_id, match.event_type.value, match.event_id, minutes)
            if key in self._cache:
                continue
            if self._sender.send(prefs.push_subscription or {}, match.payload):
                self._cache.mark_sent(key, now)
                sent += 1
            else:
                logger.warning(
                    "Could not deliver %s reminder %s to user %s",
                    match.event_type.value,
                    match.event_id,
                    prefs.user_id,
                )
        return sent

    def match_attendances(
        self,
        user_id: int,
        now: datetime,
        minutes: int,
        committees: Optional[dict[int, Optional[CommitteeShiftConfig]]] = None,
    ) -> list[ReminderMatch]:
        committees = committees if committees is not None else {}
        lo, hi = self.window(now, minutes)
        out: list[ReminderMatch] = []

        for row in self._attendance.list_for_user(user_id, since=now.date()):
            if row.attendance.status != AttendanceStatus.CONFIRMED:
                continue

            if row.committee_id not in committees:
                committees[row.committee_id] = self._committees.get_committee(row.committee_id)
            committee = committees[row.committee_id] or CommitteeShiftConfig(
                committee_id=row.committee_id, name=row.committee_name
            )

            starts_at = datetime.combine(row.slot_date, committee.shift_start(row.shift))
            if lo <= starts_at <= hi:
                out.append(
                    ReminderMatch(
                        event_type=ReminderEventType.ATTENDANCE,
                        event_id=row.attendance.attendance_id,
                        starts_at=starts_at,
                        payload=PushPayload(
                            title="Shift reminder",
                            body=f"Your {row.shift.value.replace('_', ' ')} shift at {row.committee_name} starts in {minutes} minutes",
                            data={"url": "/attendances"},
                        ),
                    )
                )
        return out

    def match_activities(self, user_id: int, now: datetime, minutes: int) -> list[ReminderMatch]:
        lo, hi = self.window(now, minutes)
        out: list[ReminderMatch] = []

        for activity in self._activities.list_pending_for_user(user_id, since=now.date()):
            starts_at = activity.starts_at()
            if lo <= starts_at <= hi:
                out.append(
                    ReminderMatch(
                        event_type=ReminderEventType.ACTIVITY,
                        event_id=activity.activity_id,
                        starts_at=starts_at,
                        payload=PushPayload(
                            title="Activity reminder",
                            body=f"{activity.title} - in {minutes} minutes",
                            data={"url": "/activities"},
                        ),
                    )
                )
        return out
