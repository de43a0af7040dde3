from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..core.constants import DEFAULT_REMINDER_MINUTES
from ..core.enums import ReminderEventType


@dataclass(frozen=True)
class NotificationPreferences:
    user_id: int
    push_enabled: bool = False
    push_subscription: Optional[dict[str, Any]] = None
    shift_reminders: bool = True
    activity_reminders: bool = True
    reminder_minutes_before: int = DEFAULT_REMINDER_MINUTES

    @property
    def can_push(self) -> bool:
        return self.push_enabled and bool(self.push_subscription)

    def to_public_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "pushEnabled": self.push_enabled,
            "shiftReminders": self.shift_reminders,
            "activityReminders": self.activity_reminders,
            "reminderMinutesBefore": self.reminder_minutes_before,
        }


@dataclass(frozen=True)
class PushPayload:
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps({"title": self.title, "body": self.body, "data": self.data})


@dataclass(frozen=True)
class ReminderMatch:
    """An event whose start falls inside the current reminder window."""

    event_type: ReminderEventType
    event_id: int
    starts_at: datetime
    payload: PushPayload
