from models.task import Task, TaskStatus, Periodicity
from models.completion import CompletionRecord, HabitMark
from models.push_subscription import PushSubscription
from models.notification import NotificationPayload, NotificationAction


__all__ = [
    "Task",
    "TaskStatus",
    "Periodicity",
    "CompletionRecord",
    "HabitMark",
    "PushSubscription",
    "NotificationPayload",
    "NotificationAction",
]
