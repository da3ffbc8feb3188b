"""CRUD operations for push subscriptions."""
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete
from sqlalchemy.dialects import mysql, postgresql, sqlite

from ..models.db_push_subscription import PushSubscription

_UPDATED_ON_CONFLICT = ("keys", "user_id", "user_agent", "updated_at")


def _upsert_statement(dialect_name: str, values: Dict[str, Any]):
    """Single INSERT ... ON CONFLICT/DUPLICATE KEY statement for the backend's dialect."""
    if dialect_name == "mysql":
        stmt = mysql.insert(PushSubscription).values(**values)
        return stmt.on_duplicate_key_update(
            {column: stmt.inserted[column] for column in _UPDATED_ON_CONFLICT}
        )
    if dialect_name in ("sqlite", "postgresql"):
        insert = sqlite.insert if dialect_name == "sqlite" else postgresql.insert
        stmt = insert(PushSubscription).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=[PushSubscription.endpoint],
            set_={column: stmt.excluded[column] for column in _UPDATED_ON_CONFLICT},
        )
    raise NotImplementedError(f"No upsert for dialect {dialect_name}")


async def upsert_push_subscription(
    db: AsyncSession,
    endpoint: str,
    keys: Optional[Dict[str, Any]] = None,
    user_id: Optional[str] = None,
    user_agent: Optional[str] = None
) -> None:
    """Create or replace the subscription for an endpoint (one row per endpoint)."""
    now = datetime.now(timezone.utc)
    stmt = _upsert_statement(
        db.get_bind().dialect.name,
        {
            "endpoint": endpoint,
            "keys": keys,
            "user_id": user_id,
            "user_agent": user_agent,
            "created_at": now,
            "updated_at": now,
        },
    )
    await db.execute(stmt)
    await db.commit()


async def get_push_subscriptions(
    db: AsyncSession,
    user_id: Optional[str] = None
) -> List[PushSubscription]:
    """Retrieve the subscriptions of one user, or all of them when user_id is None."""
    query = select(PushSubscription)
    if user_id is not None:
        query = query.filter(PushSubscription.user_id == user_id)
    result = await db.execute(query.order_by(PushSubscription.created_at))
    return result.scalars().all()


async def delete_push_subscription(
    db: AsyncSession,
    endpoint: str
) -> int:
    """Delete a subscription by endpoint. Deleting an unknown endpoint is a no-op."""
    result = await db.execute(
        delete(PushSubscription).where(PushSubscription.endpoint == endpoint)
    )
    await db.commit()
    return result.rowcount
