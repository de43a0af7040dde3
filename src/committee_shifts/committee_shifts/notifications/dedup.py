from __future__ import annotations

import threading
from datetime import datetime, timedelta
from typing import Callable, Hashable

from ..common.datetime_utils import now_local
from ..core.constants import DEDUP_TTL_SECONDS


class SentNotificationCache:
    """Expiring set of reminder keys already pushed by this process.

    Process-local: two notifier processes do not see each other's entries and would
    both send. Entries live until purge() finds them older than the TTL.
    """

    def __init__(self, *, ttl_seconds: int = DEDUP_TTL_SECONDS, clock: Callable[[], datetime] = now_local):
        self._ttl = timedelta(seconds=int(ttl_seconds))
        self._clock = clock
        self._sent: dict[Hashable, datetime] = {}
        self._lock = threading.Lock()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._sent

    def __len__(self) -> int:
        with self._lock:
            return len(self._sent)

    def mark_sent(self, key: Hashable, at: datetime | None = None) -> None:
        with self._lock:
            self._sent[key] = at or self._clock()

    def purge(self, now: datetime | None = None) -> int:
        cutoff = (now or self._clock()) - self._ttl
        with self._lock:
            stale = [k for k, sent_at in self._sent.items() if sent_at < cutoff]
            for k in stale:
                del self._sent[k]
        return len(stale)
