"""
Database model for extension tokens.
"""
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, String, DateTime, Index

from ..database import Base


class ExtensionToken(Base):
    """Short-lived bearer credential used by the browser extension."""

    __tablename__ = "extension_tokens"

    # SHA-256 of the token string; the raw token is never stored
    token_hash = Column(String(64), primary_key=True)
    # No FK: rows outlive a deleted user and then validate as dangling
    user_id = Column(String(50), nullable=False, index=True)
    name = Column(String(100), nullable=True)  # e.g. "Chrome Extension"
    issued_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    last_used_at = Column(DateTime(timezone=True), nullable=True)
    revoked = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("ix_extension_tokens_expires_at", "expires_at"),
    )
