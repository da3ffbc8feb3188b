"""
Database model for web push subscriptions.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, JSON, Text

from ..database import Base


class PushSubscription(Base):
    """Browser push subscription, identified solely by its endpoint URL."""

    __tablename__ = "push_subscriptions"

    endpoint = Column(String(768), primary_key=True)
    user_id = Column(String(50), nullable=True, index=True)
    keys = Column(JSON, nullable=True)  # { p256dh: "...", auth: "..." }
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
