from datetime import date, datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator

from auth import get_current_user, require_scheduler
from config import NOTIFICATION_BADGE, NOTIFICATION_ICON
from errors import ValidationError
from models.notification import NotificationPayload
from services.notification_service import NotificationService, SUBSCRIPTIONS_TABLE
from services.push_service import PushService, get_push_service, get_vapid_public_key
from services.schedule import get_today
from supabase_rest import get_store

router = APIRouter(prefix="/api/push", tags=["Push"])


class SubscriptionKeys(BaseModel):
    p256dh: Optional[str] = None
    auth: Optional[str] = None


class SubscriptionBody(BaseModel):
    endpoint: Optional[str] = None
    keys: Optional[SubscriptionKeys] = None


class SubscribeRequest(BaseModel):
    subscription: Optional[SubscriptionBody] = None


class UnsubscribeRequest(BaseModel):
    endpoint: Optional[str] = None


class SendRequest(BaseModel):
    userId: Optional[str] = None
    title: Optional[str] = None
    body: Optional[str] = None
    data: Optional[dict[str, Any]] = None

    @field_validator("userId", mode="before")
    @classmethod
    def _as_str(cls, v):
        return None if v is None else str(v)


def get_notification_service(store=Depends(get_store),
                             push: PushService = Depends(get_push_service)) -> NotificationService:
    return NotificationService(store, push)


# ----------------------------------------------------------------------
# Scheduler-invoked checks
# ----------------------------------------------------------------------
@router.get("/periodicity-check", dependencies=[Depends(require_scheduler)])
def periodicity_check(service: NotificationService = Depends(get_notification_service),
                      today: date = Depends(get_today)):
    return service.periodicity_check(today).to_response()


@router.get("/daily-completion-check", dependencies=[Depends(require_scheduler)])
def daily_completion_check(service: NotificationService = Depends(get_notification_service),
                           today: date = Depends(get_today)):
    return service.daily_completion_check(today).to_response()


@router.get("/streak-reminder", dependencies=[Depends(require_scheduler)])
def streak_reminder(service: NotificationService = Depends(get_notification_service),
                    today: date = Depends(get_today)):
    return service.streak_reminder(today).to_response()


@router.get("/check-notifications", dependencies=[Depends(require_scheduler)])
def check_notifications(service: NotificationService = Depends(get_notification_service),
                        today: date = Depends(get_today)):
    return service.due_task_check(today).to_response()


# ----------------------------------------------------------------------
# Subscriptions
# ----------------------------------------------------------------------
@router.get("/vapid-public-key")
def vapid_public_key():
    return {"publicKey": get_vapid_public_key()}


@router.post("/subscribe")
def subscribe(body: SubscribeRequest, user_id: str = Depends(get_current_user), store=Depends(get_store)):
    """Register this browser for pushes; re-subscribing an endpoint rotates its keys."""
    sub = body.subscription
    if not sub or not sub.endpoint:
        raise ValidationError("Invalid subscription")
    if not sub.keys or not sub.keys.p256dh or not sub.keys.auth:
        raise ValidationError("Invalid subscription keys")

    existing = store.select_one(SUBSCRIPTIONS_TABLE, filters={"user_id": user_id, "endpoint": sub.endpoint},
                                columns="id")
    if existing:
        store.update(SUBSCRIPTIONS_TABLE, {"id": existing["id"]}, {
            "p256dh": sub.keys.p256dh,
            "auth": sub.keys.auth,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        })
    else:
        store.insert(SUBSCRIPTIONS_TABLE, {
            "user_id": user_id,
            "endpoint": sub.endpoint,
            "p256dh": sub.keys.p256dh,
            "auth": sub.keys.auth,
        })
    return {"success": True}


@router.delete("/subscribe")
def unsubscribe(body: UnsubscribeRequest, user_id: str = Depends(get_current_user), store=Depends(get_store)):
    if not body.endpoint:
        raise ValidationError("Endpoint required")
    store.delete(SUBSCRIPTIONS_TABLE, {"user_id": user_id, "endpoint": body.endpoint})
    return {"success": True}


# ----------------------------------------------------------------------
# Direct send
# ----------------------------------------------------------------------
@router.post("/send", dependencies=[Depends(require_scheduler)])
def send(body: SendRequest, service: NotificationService = Depends(get_notification_service)):
    if not body.userId or not body.title or not body.body:
        raise ValidationError("Missing required fields")

    subscriptions = service.subscriptions_for(body.userId)
    if not subscriptions:
        return {"error": "No subscriptions found", "sent": 0}

    payload = NotificationPayload(
        title=body.title,
        body=body.body,
        icon=NOTIFICATION_ICON,
        badge=NOTIFICATION_BADGE,
        data=body.data or {},
    )
    report = service.send_to_subscriptions(subscriptions, payload)
    return {"success": True, "sent": report.sent, "removed": report.removed}
