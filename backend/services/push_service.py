"""
push_service.py — Web Push delivery
Sends one NotificationPayload to one browser subscription through pywebpush,
signing with the VAPID keys from config. deliver() is the per-attempt error
boundary used by fan-out: it never raises, it returns a tagged result.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from pywebpush import webpush, WebPushException

from config import VAPID_PRIVATE_KEY, VAPID_PUBLIC_KEY, VAPID_SUBJECT, PUSH_TTL_SECONDS
from errors import DeliveryError
from models.notification import NotificationPayload
from models.push_subscription import PushSubscription

logger = logging.getLogger(__name__)

# Push service answers meaning the subscription will never work again
GONE_STATUSES = (404, 410)


class DeliveryStatus(str, Enum):
    SENT = "sent"
    GONE = "gone"
    FAILED = "failed"


@dataclass(frozen=True)
class DeliveryResult:
    subscription_id: str
    status: DeliveryStatus
    error: str | None = None


class PushService:
    def __init__(self, vapid_private_key: str = VAPID_PRIVATE_KEY, vapid_subject: str = VAPID_SUBJECT,
                 ttl: int = PUSH_TTL_SECONDS):
        self.vapid_private_key = vapid_private_key
        self.vapid_subject = vapid_subject
        self.ttl = ttl

    @property
    def configured(self) -> bool:
        return bool(self.vapid_private_key)

    def send(self, subscription: PushSubscription, payload: NotificationPayload) -> DeliveryStatus:
        """
        Deliver one payload. Returns GONE when the push service reports the
        subscription as permanently invalid; raises DeliveryError otherwise.
        """
        if not self.configured:
            raise DeliveryError("VAPID keys are not configured")
        try:
            webpush(
                subscription_info=subscription.to_webpush(),
                data=payload.to_json(),
                vapid_private_key=self.vapid_private_key,
                vapid_claims={"sub": self.vapid_subject},
                ttl=self.ttl,
            )
        except WebPushException as e:
            status = e.response.status_code if e.response is not None else None
            if status in GONE_STATUSES:
                return DeliveryStatus.GONE
            raise DeliveryError(str(e), status=status) from e
        return DeliveryStatus.SENT

    def deliver(self, subscription: PushSubscription, payload: NotificationPayload) -> DeliveryResult:
        try:
            status = self.send(subscription, payload)
        except Exception as e:
            logger.warning("Push to subscription %s failed: %s", subscription.id, e)
            return DeliveryResult(subscription.id, DeliveryStatus.FAILED, str(e))
        if status is DeliveryStatus.GONE:
            logger.info("Subscription %s is gone, queued for removal", subscription.id)
        return DeliveryResult(subscription.id, status)


def get_push_service() -> PushService:
    """FastAPI dependency."""
    return PushService()


def get_vapid_public_key() -> str:
    return VAPID_PUBLIC_KEY
