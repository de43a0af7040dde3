from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import MemberActivity


class ActivityRepository(Protocol):
    def list_pending_for_user(self, user_id: int, *, since: date) -> Sequence[MemberActivity]:
        """Uncompleted activities of the user dated on or after `since`."""

        raise NotImplementedError
