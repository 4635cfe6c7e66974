from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from auth import get_current_user
from services.habit_service import HabitService
from services.schedule import get_today
from supabase_rest import get_store

router = APIRouter(prefix="/api/habits", tags=["Habits"])


class MarkToggle(BaseModel):
    day: Optional[date] = Field(default=None, alias="date")  # defaults to today


@router.get("/{task_id}/marks")
def list_marks(task_id: str, user_id: str = Depends(get_current_user),
               store=Depends(get_store), today: date = Depends(get_today)):
    return HabitService(store).summary(task_id, user_id, today)


@router.post("/{task_id}/marks")
def toggle_mark(task_id: str, body: Optional[MarkToggle] = None, user_id: str = Depends(get_current_user),
                store=Depends(get_store), today: date = Depends(get_today)):
    """Tick or untick one calendar day on the habit tracker."""
    day = (body.day if body else None) or today
    return HabitService(store).toggle(task_id, user_id, day, today)
