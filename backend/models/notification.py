from typing import Any, Optional

from pydantic import BaseModel, Field


class NotificationAction(BaseModel):
    action: str
    title: str
    icon: Optional[str] = None


class NotificationPayload(BaseModel):
    """What the service worker receives. Not persisted."""

    title: str
    body: str
    icon: Optional[str] = None
    badge: Optional[str] = None
    tag: Optional[str] = None  # client-side de-duplication / grouping
    data: dict[str, Any] = Field(default_factory=dict)
    actions: list[NotificationAction] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)
