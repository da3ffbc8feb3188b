"""
Database models for the helpdesk user table and its web sessions.
"""
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, String, DateTime, ForeignKey

from ..database import Base


class User(Base):
    """Helpdesk account (client, agent or admin)."""

    __tablename__ = "users"

    id = Column(String(50), primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), default="client", nullable=False)  # client, agent, admin
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)


class UserSession(Base):
    """Primary web session. Only read here, to authenticate extension pairing."""

    __tablename__ = "user_sessions"

    session_token = Column(String(255), primary_key=True)
    user_id = Column(String(50), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
