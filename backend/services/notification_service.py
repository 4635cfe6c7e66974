"""
notification_service.py — Scheduled push reminders
Loads the task snapshot each cron-invoked check needs, turns it into per-user
payloads (services.reminders) and fans them out to every subscription the user
has registered. One user's failure never suppresses the others; subscriptions
the push service reports as gone are removed in a single call at the end.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable
from urllib.parse import quote

import pydantic

from errors import StorageError
from models.notification import NotificationPayload
from models.push_subscription import PushSubscription
from models.task import Task
from services import reminders
from services.push_service import DeliveryResult, DeliveryStatus, PushService
from services.schedule import day_bounds
from supabase_rest import in_list

logger = logging.getLogger(__name__)

TASKS_TABLE = "tasks"
SUBSCRIPTIONS_TABLE = "push_subscriptions"
MARKS_TABLE = "habit_day_marks"

INTENTION_COLUMNS = ("id,title,trigger_if,action_then,periodicity,custom_days,user_id,status,"
                     "current_streak,best_streak,last_completed_at")
OPEN_INTENTIONS = "trigger_if=not.is.null&action_then=not.is.null&status=neq.completed"


@dataclass
class FanOutReport:
    users_notified: int = 0
    sent: int = 0
    failed: int = 0
    removed: int = 0


@dataclass
class CheckReport:
    checked: int = 0
    users_notified: int = 0
    sent: int = 0

    def to_response(self) -> dict:
        return {
            "success": True,
            "checked": self.checked,
            "usersNotified": self.users_notified,
            "sent": self.sent,
        }


class NotificationService:
    def __init__(self, store, push: PushService):
        self.store = store
        self.push = push

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------
    def subscriptions_for(self, user_id: str) -> list[PushSubscription]:
        rows = self.store.select(SUBSCRIPTIONS_TABLE, filters={"user_id": user_id})
        subscriptions = []
        for row in rows:
            try:
                subscriptions.append(PushSubscription.model_validate(row))
            except pydantic.ValidationError:
                logger.warning("Skipping malformed push subscription %s for user %s", row.get("id"), user_id)
        return subscriptions

    def _deliver_to_user(self, notification: reminders.UserNotification) -> list[DeliveryResult]:
        try:
            subscriptions = self.subscriptions_for(notification.user_id)
        except StorageError:
            logger.error("Could not load push subscriptions for user %s, skipping", notification.user_id)
            return []
        return [
            self.push.deliver(subscription, payload)
            for payload in notification.payloads
            for subscription in subscriptions
        ]

    def prune(self, subscription_ids: Iterable[str]) -> int:
        """Delete gone subscriptions in one call. Returns how many were removed."""
        ids = list(dict.fromkeys(subscription_ids))
        if not ids:
            return 0
        try:
            self.store.delete_in(SUBSCRIPTIONS_TABLE, "id", ids)
        except StorageError:
            logger.error("Failed to remove %d invalid push subscriptions", len(ids))
            return 0
        logger.info("Removed %d invalid push subscriptions", len(ids))
        return len(ids)

    def _fold(self, results: list[DeliveryResult], users_notified: int) -> FanOutReport:
        return FanOutReport(
            users_notified=users_notified,
            sent=sum(1 for r in results if r.status is DeliveryStatus.SENT),
            failed=sum(1 for r in results if r.status is DeliveryStatus.FAILED),
            removed=self.prune(r.subscription_id for r in results if r.status is DeliveryStatus.GONE),
        )

    def notify_users(self, notifications: Iterable[reminders.UserNotification]) -> FanOutReport:
        notifications = [n for n in notifications if n.payloads]
        results: list[DeliveryResult] = []
        for notification in notifications:
            results.extend(self._deliver_to_user(notification))
        return self._fold(results, users_notified=len(notifications))

    def send_to_subscriptions(self, subscriptions: list[PushSubscription],
                              payload: NotificationPayload) -> FanOutReport:
        """Deliver one payload to the given devices of a single user."""
        results = [self.push.deliver(subscription, payload) for subscription in subscriptions]
        return self._fold(results, users_notified=1 if subscriptions else 0)

    # ------------------------------------------------------------------
    # Scheduled checks
    # ------------------------------------------------------------------
    def _load_tasks(self, query_string: str, columns: str = INTENTION_COLUMNS) -> list[Task]:
        rows = self.store.select(TASKS_TABLE, columns=columns, query_string=query_string)
        return [Task.model_validate(row) for row in rows]

    def _run(self, checked: int, notifications: list[reminders.UserNotification]) -> CheckReport:
        if not notifications:
            return CheckReport(checked=checked)
        fan_out = self.notify_users(notifications)
        return CheckReport(checked=checked, users_notified=len(notifications), sent=fan_out.sent)

    def periodicity_check(self, today: date) -> CheckReport:
        """Morning reminder for every recurring intention due today."""
        tasks = self._load_tasks(f"{OPEN_INTENTIONS}&periodicity=neq.one_time")
        return self._run(len(tasks), reminders.periodicity_reminders(tasks, today))

    def daily_completion_check(self, today: date) -> CheckReport:
        """Evening nudge for intentions due today and not completed yet."""
        tasks = self._load_tasks(f"{OPEN_INTENTIONS}&periodicity=neq.one_time")
        return self._run(len(tasks), reminders.daily_completion_reminders(tasks, today))

    def streak_reminder(self, today: date) -> CheckReport:
        """Warn about streaks of 3+ days that haven't been ticked today."""
        tasks = self._load_tasks(f"{OPEN_INTENTIONS}&current_streak=gte.3")
        if not tasks:
            return CheckReport()

        marks = self.store.select(
            MARKS_TABLE,
            columns="task_id",
            query_string=f"task_id=in.{in_list(t.id for t in tasks)}&marked_date=eq.{today.isoformat()}",
        )
        marked_today = {str(m["task_id"]) for m in marks}
        return self._run(len(tasks), reminders.streak_risk_reminders(tasks, marked_today))

    def due_task_check(self, today: date) -> CheckReport:
        """Digest of tasks due today and overdue, by due_date."""
        start, end = day_bounds(today)
        start_q, end_q = quote(start.isoformat()), quote(end.isoformat())
        columns = "id,title,user_id,due_date,status"

        due_today = self._load_tasks(f"due_date=gte.{start_q}&due_date=lt.{end_q}&status=neq.completed", columns)
        overdue = self._load_tasks(f"due_date=lt.{start_q}&status=neq.completed", columns)
        return self._run(len(due_today) + len(overdue), reminders.due_task_digests(due_today, overdue))
