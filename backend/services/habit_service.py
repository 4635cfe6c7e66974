"""
habit_service.py — Habit tracker calendar
Ticks and unticks calendar days for a habit task (habit_day_marks) and derives
the calendar streaks from the ticked days.
"""

from datetime import date

from errors import NotFoundError, ValidationError
from models.completion import HabitMark
from services.completion_ledger import current_streak, longest_streak

MARKS_TABLE = "habit_day_marks"
HABIT_GOAL_DAYS = 21


class HabitService:
    def __init__(self, store):
        self.store = store

    def _check_owner(self, task_id: str, user_id: str):
        if not self.store.select_one("tasks", filters={"id": task_id, "user_id": user_id}, columns="id"):
            raise NotFoundError("Task not found")

    def marks(self, task_id: str, user_id: str) -> list[HabitMark]:
        self._check_owner(task_id, user_id)
        rows = self.store.select(MARKS_TABLE, filters={"task_id": task_id}, columns="id,task_id,marked_date")
        return sorted((HabitMark.model_validate(r) for r in rows), key=lambda m: m.marked_date)

    def summary(self, task_id: str, user_id: str, today: date) -> dict:
        marks = self.marks(task_id, user_id)
        days = [m.marked_date for m in marks]
        return {
            "taskId": task_id,
            "marks": [m.marked_date.isoformat() for m in marks],
            "totalDays": len(days),
            "goalDays": HABIT_GOAL_DAYS,
            "habitFormed": len(days) >= HABIT_GOAL_DAYS,
            "currentStreak": current_streak(days, today),
            "longestStreak": longest_streak(days),
        }

    def toggle(self, task_id: str, user_id: str, day: date, today: date) -> dict:
        """Tick `day` if unticked, untick it otherwise. Future days are rejected."""
        if day > today:
            raise ValidationError("Cannot mark a future date")
        self._check_owner(task_id, user_id)

        filters = {"task_id": task_id, "marked_date": day.isoformat()}
        if self.store.select(MARKS_TABLE, filters=filters, columns="id"):
            self.store.delete(MARKS_TABLE, filters)
        else:
            self.store.insert(MARKS_TABLE, {**filters, "user_id": user_id})
        return self.summary(task_id, user_id, today)
