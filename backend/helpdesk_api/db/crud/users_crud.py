"""CRUD operations for users and web sessions."""
from typing import Optional
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import and_

from ..models.db_user import User, UserSession


async def get_user_by_id(
    db: AsyncSession,
    user_id: str
) -> Optional[User]:
    """Retrieve a user by ID."""
    result = await db.execute(
        select(User).filter(User.id == user_id)
    )
    return result.scalar_one_or_none()


async def get_user_id_by_session_token(
    db: AsyncSession,
    session_token: str,
    now: Optional[datetime] = None
) -> Optional[str]:
    """Return the owner of a web session, or None if it is unknown or expired."""
    now = now or datetime.now(timezone.utc)
    result = await db.execute(
        select(UserSession.user_id).filter(
            and_(
                UserSession.session_token == session_token,
                UserSession.expires_at > now
            )
        )
    )
    return result.scalar_one_or_none()
