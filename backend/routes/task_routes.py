import json
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator

from auth import get_current_user
from errors import ValidationError
from models.task import Periodicity, TaskStatus
from services.schedule import DAY_NAMES
from supabase_rest import get_store

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])


class TaskCreate(BaseModel):
    title: Optional[str] = None
    project_id: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = "medium"
    due_date: Optional[str] = None
    # Implementation intention
    trigger_if: Optional[str] = None
    action_then: Optional[str] = None
    periodicity: Optional[str] = None
    custom_days: Optional[list[str]] = None

    @field_validator("project_id", mode="before")
    @classmethod
    def _as_str(cls, v):
        return None if v is None else str(v)


def _intention_fields(task: TaskCreate) -> dict:
    """Validate and normalise the if-then columns; empty dict for plain tasks."""
    if not task.trigger_if and not task.action_then:
        return {}
    if not task.trigger_if or not task.action_then:
        raise ValidationError("Both trigger_if and action_then are required for an intention")

    try:
        periodicity = Periodicity(task.periodicity or Periodicity.ONE_TIME.value)
    except ValueError:
        raise ValidationError(f"Unknown periodicity: {task.periodicity}")

    fields = {
        "trigger_if": task.trigger_if,
        "action_then": task.action_then,
        "periodicity": periodicity.value,
    }
    if periodicity is Periodicity.CUSTOM:
        days = [d.strip().lower() for d in task.custom_days or []]
        if not days:
            raise ValidationError("custom_days is required for a custom periodicity")
        unknown = [d for d in days if d not in DAY_NAMES]
        if unknown:
            raise ValidationError(f"Unknown day names: {', '.join(unknown)}")
        fields["custom_days"] = json.dumps(days, ensure_ascii=False)
    return fields


@router.post("/create")
def create_task(task: TaskCreate, user_id: str = Depends(get_current_user), store=Depends(get_store)):
    if not task.title or not task.project_id:
        raise ValidationError("Title and project_id are required")

    data = {
        "title": task.title,
        "description": task.description or None,
        "priority": task.priority or "medium",
        "due_date": task.due_date or None,
        "project_id": task.project_id,
        "user_id": user_id,
        "status": TaskStatus.TODO.value,
        **_intention_fields(task),
    }
    return {"task": store.insert("tasks", data)}
