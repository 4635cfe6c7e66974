from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator

from auth import get_current_user
from errors import ValidationError
from services.intention_service import IntentionService
from services.schedule import get_today
from supabase_rest import get_store

router = APIRouter(prefix="/api/intentions", tags=["Intentions"])


class CompleteRequest(BaseModel):
    taskId: Optional[str] = None

    @field_validator("taskId", mode="before")
    @classmethod
    def _as_str(cls, v):
        return None if v is None else str(v)


@router.post("/complete")
def complete_intention(body: CompleteRequest, user_id: str = Depends(get_current_user),
                       store=Depends(get_store), today: date = Depends(get_today)):
    """Mark an if-then intention as done today and report the updated streak."""
    if not body.taskId:
        raise ValidationError("Task ID required")
    return IntentionService(store).complete(body.taskId, user_id, today)


@router.get("/complete")
def intention_status(taskId: Optional[str] = None, user_id: str = Depends(get_current_user),
                     store=Depends(get_store), today: date = Depends(get_today)):
    if not taskId:
        raise ValidationError("Task ID required")
    return IntentionService(store).status(taskId, user_id, today)
