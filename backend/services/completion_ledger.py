"""
completion_ledger.py — Per-day completion records for intentions.
Append-only: one intention_completions row per (task, calendar day). Streak
counters on the task are recomputed by a database trigger on insert; this
module never does streak arithmetic for tasks, it only reads the result.

Also holds the calendar streak used by the habit tracker, which works from
the set of ticked days directly.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from errors import StorageError
from models.completion import CompletionRecord

logger = logging.getLogger(__name__)

COMPLETIONS_TABLE = "intention_completions"


@dataclass
class CompletionResult:
    already_completed: bool
    record: CompletionRecord | None = None


class CompletionLedger:
    def __init__(self, store):
        self.store = store

    def has_completed_today(self, task_id: str, today: date) -> bool:
        rows = self.store.select(
            COMPLETIONS_TABLE,
            filters={"task_id": task_id, "completed_at": today.isoformat()},
            columns="id",
        )
        return bool(rows)

    def record_completion(self, task_id: str, user_id: str, today: date) -> CompletionResult:
        """
        Insert today's completion. A second call for the same (task, day)
        reports already_completed instead of duplicating, including when a
        concurrent request wins the insert (unique key conflict).
        """
        if self.has_completed_today(task_id, today):
            return CompletionResult(already_completed=True)

        record = CompletionRecord(task_id=task_id, user_id=user_id, completed_at=today)
        try:
            self.store.insert(COMPLETIONS_TABLE, record.model_dump(mode="json"))
        except StorageError as e:
            if e.is_conflict:
                logger.info("Completion for task %s on %s already recorded", task_id, today)
                return CompletionResult(already_completed=True)
            raise
        return CompletionResult(already_completed=False, record=record)


# ----------------------------------------------------------------------
def current_streak(marked_dates: Iterable[date], today: date) -> int:
    """
    Consecutive marked days ending today. An unmarked today is tolerated
    (the day isn't over yet): the count then ends yesterday.
    """
    marked = set(marked_dates)
    cursor = today
    if cursor not in marked:
        cursor -= timedelta(days=1)

    streak = 0
    while cursor in marked:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def longest_streak(marked_dates: Iterable[date]) -> int:
    """Longest run of consecutive marked days anywhere in the history."""
    longest = 0
    run = 0
    previous: date | None = None
    for day in sorted(set(marked_dates)):
        if previous is not None and day == previous + timedelta(days=1):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day
    return longest
