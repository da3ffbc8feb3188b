"""
Utility functions for authenticating the primary web session.
"""
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..api.schemas.user import UserInfo
from ..config.settings import SESSION_COOKIE_NAME
from ..core.exceptions import AuthFailure, StorageError
from ..db.crud import users_crud
from ..db.database import get_db


async def get_session_token_from_header_or_cookie(request: Request) -> Optional[str]:
    """
    Extract the web session token.

    Priority:
    1. Authorization header: "Bearer <session token>"
    2. Cookie: SESSION_COOKIE_NAME

    Returns None if no token is found.
    """
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.replace("Bearer ", "", 1).strip() or None

    return request.cookies.get(SESSION_COOKIE_NAME) or None


async def get_session_user_id(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> str:
    """Return the user_id of the logged-in web session, or raise AuthFailure."""
    session_token = await get_session_token_from_header_or_cookie(request)
    if not session_token:
        raise AuthFailure(message="Not authenticated: session missing")

    try:
        user_id = await users_crud.get_user_id_by_session_token(db, session_token)
    except SQLAlchemyError as e:
        raise StorageError(str(e)) from e

    if not user_id:
        raise AuthFailure(message="Session invalid or expired")
    return user_id


async def get_session_user(
    user_id: str = Depends(get_session_user_id),
    db: AsyncSession = Depends(get_db),
) -> UserInfo:
    """Return the logged-in user's record (role included)."""
    try:
        user = await users_crud.get_user_by_id(db, user_id)
    except SQLAlchemyError as e:
        raise StorageError(str(e)) from e

    if user is None or not user.is_active:
        raise AuthFailure(message="User not found or inactive")
    return UserInfo.model_validate(user)
