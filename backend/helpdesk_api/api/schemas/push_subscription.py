"""Pydantic schemas for web push subscriptions."""
from typing import Optional

from pydantic import BaseModel, Field


class PushSubscriptionKeys(BaseModel):
    p256dh: Optional[str] = None
    auth: Optional[str] = None


class PushSubscriptionData(BaseModel):
    """Browser PushSubscription as serialized by the service worker."""
    endpoint: str = Field(..., min_length=1)
    keys: Optional[PushSubscriptionKeys] = None


class PushSubscribeRequest(BaseModel):
    subscription: PushSubscriptionData
    user_agent: Optional[str] = Field(None, alias="userAgent")
    user_id: Optional[str] = Field(None, alias="userId")

    class Config:
        populate_by_name = True


class PushUnsubscribeRequest(BaseModel):
    subscription: PushSubscriptionData


class PushSendRequest(BaseModel):
    """Notification to fan out; without userId it goes to every subscription."""
    user_id: Optional[str] = Field(None, alias="userId")
    title: str = Field("Notification", max_length=200)
    message: str = Field("", max_length=2000)
    url: str = Field("/", max_length=2000)

    class Config:
        populate_by_name = True


class PushSendResponse(BaseModel):
    success: bool = True
    sent: int
    failed: int
    removed: int
