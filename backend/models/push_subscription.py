from pydantic import BaseModel, ConfigDict, field_validator


class PushSubscription(BaseModel):
    """
    A row of `push_subscriptions`. Unique per (user_id, endpoint); keys are
    rotated in place when the same endpoint re-subscribes.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    endpoint: str
    p256dh: str
    auth: str

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def _as_str(cls, v):
        return str(v)

    def to_webpush(self) -> dict:
        """Subscription info in the shape pywebpush expects."""
        return {
            "endpoint": self.endpoint,
            "keys": {"p256dh": self.p256dh, "auth": self.auth},
        }
