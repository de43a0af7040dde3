from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NotificationPreferences


class PreferencesRepository(Protocol):
    def get(self, user_id: int) -> Optional[NotificationPreferences]:
        raise NotImplementedError

    def upsert(self, prefs: NotificationPreferences) -> NotificationPreferences:
        raise NotImplementedError

    def list_push_enabled(self) -> Sequence[NotificationPreferences]:
        """Rows with push_enabled=1 and a stored subscription."""

        raise NotImplementedError
