from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping, Optional

from ..common.validators import require_int
from ..core.constants import MAX_REMINDER_MINUTES
from ..core.exceptions import ValidationError
from .model import NotificationPreferences, PushPayload
from .push import PushSender
from .repository import PreferencesRepository

logger = logging.getLogger(__name__)


class NotificationPreferencesService:
    def __init__(self, preferences: PreferencesRepository, sender: PushSender):
        self._preferences = preferences
        self._sender = sender

    def get_preferences(self, user_id: int) -> NotificationPreferences:
        return self._preferences.get(user_id) or NotificationPreferences(user_id=int(user_id))

    def update_preferences(
        self,
        user_id: int,
        *,
        shift_reminders: Optional[bool] = None,
        activity_reminders: Optional[bool] = None,
        reminder_minutes_before: Any = None,
    ) -> NotificationPreferences:
        current = self.get_preferences(user_id)
        changes: dict[str, Any] = {}
        if shift_reminders is not None:
            changes["shift_reminders"] = bool(shift_reminders)
        if activity_reminders is not None:
            changes["activity_reminders"] = bool(activity_reminders)
        if reminder_minutes_before is not None:
            changes["reminder_minutes_before"] = require_int(
                reminder_minutes_before, "reminderMinutesBefore", minimum=1, maximum=MAX_REMINDER_MINUTES
            )

        return self._preferences.upsert(replace(current, **changes))

    def save_subscription(self, user_id: int, subscription: Any) -> NotificationPreferences:
        if not isinstance(subscription, Mapping):
            raise ValidationError("Subscription required")
        keys = subscription.get("keys")
        if not subscription.get("endpoint") or not isinstance(keys, Mapping) or not keys.get("p256dh") or not keys.get("auth"):
            raise ValidationError("Subscription must include endpoint and keys (p256dh, auth)")

        prefs = replace(self.get_preferences(user_id), push_enabled=True, push_subscription=dict(subscription))
        logger.info("Push subscription saved for user %s", user_id)
        return self._preferences.upsert(prefs)

    def remove_subscription(self, user_id: int) -> NotificationPreferences:
        prefs = replace(self.get_preferences(user_id), push_enabled=False, push_subscription=None)
        logger.info("Push subscription removed for user %s", user_id)
        return self._preferences.upsert(prefs)

    def send_test(self, user_id: int) -> bool:
        prefs = self.get_preferences(user_id)
        if not prefs.can_push:
            raise ValidationError("Push notifications not enabled")

        return self._sender.send(
            prefs.push_subscription or {},
            PushPayload(
                title="Test notification",
                body="Push notifications are working.",
                data={"url": "/"},
            ),
        )
