"""
reminders.py — Which users get which notification.
Pure functions from task rows to per-user payload lists; no I/O here. The
fan-out in notification_service delivers whatever these return.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from config import APP_LANGUAGE, DASHBOARD_URL, NOTIFICATION_BADGE, NOTIFICATION_ICON
from models.notification import NotificationAction, NotificationPayload
from models.task import Periodicity, Task
from services.messages import intention_line, t
from services.milestones import classify
from services.schedule import is_due_today, is_same_local_day


@dataclass
class UserNotification:
    user_id: str
    payloads: list[NotificationPayload] = field(default_factory=list)


def group_by_user(tasks: Iterable[Task]) -> dict[str, list[Task]]:
    grouped: dict[str, list[Task]] = {}
    for task in tasks:
        grouped.setdefault(task.user_id, []).append(task)
    return grouped


def _due_intentions(tasks: Iterable[Task], today: date) -> list[Task]:
    # Recurring-reminder paths: one_time intentions are never due here.
    return [
        task for task in tasks
        if task.is_intention and is_due_today(task.periodicity, task.custom_days, today, one_time_due=False)
    ]


# ----------------------------------------------------------------------
# Periodicity reminders: one payload per due intention
# ----------------------------------------------------------------------
def periodicity_payload(task: Task, language: str = APP_LANGUAGE) -> NotificationPayload:
    milestone = classify(task.current_streak)
    if milestone:
        title = f"{milestone.emoji} {milestone.message(language)}"
    elif task.periodicity == Periodicity.DAILY.value:
        title = t("intention_daily", language)
    elif task.periodicity == Periodicity.WEEKLY.value:
        title = t("intention_weekly", language)
    else:
        title = t("intention_due", language)

    return NotificationPayload(
        title=title,
        body=intention_line(task.trigger_if, task.action_then, language),
        icon=NOTIFICATION_ICON,
        tag=f"intention-{task.id}",
        data={"url": DASHBOARD_URL, "taskId": task.id, "type": "periodicity_reminder"},
        actions=[
            NotificationAction(action="complete", title=t("action_complete", language)),
            NotificationAction(action="snooze", title=t("action_snooze", language)),
        ],
    )


def periodicity_reminders(tasks: Iterable[Task], today: date, language: str = APP_LANGUAGE) -> list[UserNotification]:
    return [
        UserNotification(user_id, [periodicity_payload(task, language) for task in user_tasks])
        for user_id, user_tasks in group_by_user(_due_intentions(tasks, today)).items()
    ]


# ----------------------------------------------------------------------
# Evening check: one payload per user with intentions still open today
# ----------------------------------------------------------------------
def completion_check_payload(user_tasks: list[Task], language: str = APP_LANGUAGE) -> NotificationPayload:
    count = len(user_tasks)
    if count == 1:
        title = t("completion_check_one", language)
        body = intention_line(user_tasks[0].trigger_if, user_tasks[0].action_then, language)
    else:
        title = t("completion_check_many", language)
        body = t("completion_check_many_body", language, count=count)

    return NotificationPayload(
        title=title,
        body=body,
        icon=NOTIFICATION_ICON,
        tag="daily-completion-check",
        data={"url": DASHBOARD_URL, "type": "daily_completion_reminder", "taskCount": count},
        actions=[
            NotificationAction(action="view", title=t("action_view_pending", language)),
            NotificationAction(action="dismiss", title=t("action_all_done", language)),
        ],
    )


def daily_completion_reminders(tasks: Iterable[Task], today: date,
                               language: str = APP_LANGUAGE) -> list[UserNotification]:
    pending = [task for task in _due_intentions(tasks, today) if not is_same_local_day(task.last_completed_at, today)]
    return [
        UserNotification(user_id, [completion_check_payload(user_tasks, language)])
        for user_id, user_tasks in group_by_user(pending).items()
    ]


# ----------------------------------------------------------------------
# Streaks at risk: streak >= 3 and not ticked today
# ----------------------------------------------------------------------
def streak_risk_payload(user_tasks: list[Task], language: str = APP_LANGUAGE) -> NotificationPayload:
    count = len(user_tasks)
    longest = max(task.current_streak for task in user_tasks)
    if count == 1:
        task = user_tasks[0]
        title = t("streak_risk_one", language, streak=task.current_streak)
        body = intention_line(task.trigger_if, task.action_then, language)
    else:
        title = t("streak_risk_many", language, count=count)
        body = t("streak_risk_many_body", language, streak=longest)

    return NotificationPayload(
        title=title,
        body=body,
        icon=NOTIFICATION_ICON,
        badge=NOTIFICATION_BADGE,
        tag="streak-reminder",
        data={"url": DASHBOARD_URL, "type": "streak_reminder", "taskCount": count, "longestStreak": longest},
        actions=[
            NotificationAction(action="mark", title=t("action_mark", language)),
            NotificationAction(action="view", title=t("action_view_streaks", language)),
        ],
    )


def streak_risk_reminders(tasks: Iterable[Task], marked_today: set[str],
                          language: str = APP_LANGUAGE) -> list[UserNotification]:
    at_risk = [task for task in tasks if task.id not in marked_today]
    return [
        UserNotification(user_id, [streak_risk_payload(user_tasks, language)])
        for user_id, user_tasks in group_by_user(at_risk).items()
    ]


# ----------------------------------------------------------------------
# Due-date digest: tasks due today and overdue, one payload per user
# ----------------------------------------------------------------------
def due_digest_payload(due_count: int, overdue_count: int, language: str = APP_LANGUAGE) -> NotificationPayload | None:
    if overdue_count and due_count:
        title = t("tasks_pending", language)
        body = t("tasks_pending_body", language, overdue=overdue_count, due=due_count)
    elif overdue_count:
        title = t("tasks_overdue", language)
        body = t("tasks_overdue_body", language, overdue=overdue_count)
    elif due_count:
        title = t("tasks_due", language)
        body = t("tasks_due_body", language, due=due_count)
    else:
        return None

    return NotificationPayload(
        title=title,
        body=body,
        icon=NOTIFICATION_ICON,
        tag="daily-reminder",
        data={"url": DASHBOARD_URL},
    )


def due_task_digests(due_today: Iterable[Task], overdue: Iterable[Task],
                     language: str = APP_LANGUAGE) -> list[UserNotification]:
    due_by_user = group_by_user(due_today)
    overdue_by_user = group_by_user(overdue)

    notifications = []
    for user_id in dict.fromkeys([*due_by_user, *overdue_by_user]):
        payload = due_digest_payload(len(due_by_user.get(user_id, [])), len(overdue_by_user.get(user_id, [])), language)
        if payload:
            notifications.append(UserNotification(user_id, [payload]))
    return notifications
