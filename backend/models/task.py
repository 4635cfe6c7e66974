from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Periodicity(str, Enum):
    ONE_TIME = "one_time"
    DAILY = "daily"
    WEEKLY = "weekly"
    CUSTOM = "custom"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Task(BaseModel):
    """A row of the `tasks` table. Unknown columns are ignored."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None  # todo/in_progress/completed
    priority: Optional[str] = None
    due_date: Optional[str] = None
    project_id: Optional[str] = None

    # Implementation-intention ("if X, then Y") columns
    trigger_if: Optional[str] = None
    action_then: Optional[str] = None
    periodicity: Optional[str] = None  # kept raw: unknown values must not fail parsing
    custom_days: Any = None  # JSON text or list of weekday names
    current_streak: int = 0  # maintained by a database trigger
    best_streak: int = 0
    last_completed_at: Optional[datetime] = None

    @field_validator("id", "user_id", "project_id", mode="before")
    @classmethod
    def _as_str(cls, v):
        return None if v is None else str(v)

    @field_validator("current_streak", "best_streak", mode="before")
    @classmethod
    def _null_streak(cls, v):
        return v or 0

    @property
    def is_intention(self) -> bool:
        return bool(self.trigger_if and self.action_then)
