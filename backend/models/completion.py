from datetime import date

from pydantic import BaseModel, ConfigDict, field_validator


class CompletionRecord(BaseModel):
    """
    A row of `intention_completions`. Natural key: (task_id, completed_at).
    Never updated; never deleted in normal flow.
    """

    model_config = ConfigDict(extra="ignore")

    task_id: str
    user_id: str
    completed_at: date

    @field_validator("task_id", "user_id", mode="before")
    @classmethod
    def _as_str(cls, v):
        return str(v)


class HabitMark(BaseModel):
    """A row of `habit_day_marks`: one calendar day ticked on the habit tracker."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    task_id: str
    marked_date: date

    @field_validator("id", "task_id", mode="before")
    @classmethod
    def _as_str(cls, v):
        return None if v is None else str(v)
