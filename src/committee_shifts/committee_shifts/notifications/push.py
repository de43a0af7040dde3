from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from pywebpush import WebPushException, webpush

from .model import PushPayload

logger = logging.getLogger(__name__)


class PushSender(Protocol):
    def send(self, subscription: Mapping[str, Any], payload: PushPayload) -> bool:
        """Deliver one notification. False on delivery failure; never raises for it."""

        raise NotImplementedError


class WebPushSender(PushSender):
    """Web Push delivery signed with the organization's VAPID key pair."""

    def __init__(self, *, vapid_private_key: str, vapid_subject: str, ttl_seconds: int = 3600):
        self._private_key = vapid_private_key
        self._claims = {"sub": vapid_subject}
        self._ttl = int(ttl_seconds)

    def send(self, subscription: Mapping[str, Any], payload: PushPayload) -> bool:
        if not self._private_key:
            logger.warning("VAPID_PRIVATE_KEY is not set; dropping push '%s'", payload.title)
            return False

        try:
            webpush(
                subscription_info=dict(subscription),
                data=payload.to_json(),
                vapid_private_key=self._private_key,
                vapid_claims=dict(self._claims),
                ttl=self._ttl,
            )
            return True
        except WebPushException as e:
            status = getattr(e.response, "status_code", None) if e.response is not None else None
            logger.warning("Push to %s failed (status=%s): %s", subscription.get("endpoint", "?"), status, e)
            return False
