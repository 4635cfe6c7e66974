"""
intention_service.py — Marking "if X, then Y" intentions done.
Records today's completion through the ledger, then re-reads the streak the
database trigger recomputed and dresses it up with a celebration.
"""

from datetime import date

from errors import NotFoundError
from models.task import Task
from services.completion_ledger import CompletionLedger
from services.messages import t
from services.milestones import celebrate, is_milestone

TASKS_TABLE = "tasks"


class IntentionService:
    def __init__(self, store):
        self.store = store
        self.ledger = CompletionLedger(store)

    def _owned_task(self, task_id: str, user_id: str) -> Task:
        row = self.store.select_one(
            TASKS_TABLE,
            filters={"id": task_id, "user_id": user_id},
            columns="id,user_id,title,trigger_if,action_then,current_streak,best_streak",
        )
        if not row:
            raise NotFoundError("Task not found")
        return Task.model_validate(row)

    def _streaks(self, task_id: str) -> dict:
        return self.store.select_one(TASKS_TABLE, filters={"id": task_id}, columns="current_streak,best_streak") or {}

    def complete(self, task_id: str, user_id: str, today: date) -> dict:
        task = self._owned_task(task_id, user_id)

        result = self.ledger.record_completion(task_id, user_id, today)
        if result.already_completed:
            return {
                "success": True,
                "alreadyCompleted": True,
                "message": t("already_completed"),
                "streak": task.current_streak,
                "bestStreak": task.best_streak,
            }

        # Insert and re-read are separate round-trips; a stale read self-heals on the next GET.
        updated = self._streaks(task_id)
        streak = updated.get("current_streak") or 1
        best = updated.get("best_streak") or streak
        celebration = celebrate(streak)

        return {
            "success": True,
            "alreadyCompleted": False,
            "streak": streak,
            "bestStreak": best,
            "isNewBest": streak == best and streak > task.best_streak,
            "isMilestone": is_milestone(streak),
            "celebrationEmoji": celebration.emoji,
            "message": celebration.message(),
        }

    def status(self, task_id: str, user_id: str, today: date) -> dict:
        task = self._owned_task(task_id, user_id)
        return {
            "completedToday": self.ledger.has_completed_today(task_id, today),
            "streak": task.current_streak,
            "bestStreak": task.best_streak,
        }
