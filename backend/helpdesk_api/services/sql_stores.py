"""
SQLAlchemy-backed implementations of the storage capabilities.

Driver errors are logged here and re-raised as StorageError.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..api.schemas.user import UserInfo
from ..core.exceptions import StorageError
from ..db.crud import extension_tokens_crud, push_subscriptions_crud, users_crud
from ..db.models.db_extension_token import ExtensionToken
from .extension_token_service import as_utc
from .interfaces import ExtensionTokenRecord, PushSubscriptionRecord

logger = logging.getLogger(__name__)


def _to_record(row: ExtensionToken) -> ExtensionTokenRecord:
    return ExtensionTokenRecord(
        token_hash=row.token_hash,
        user_id=row.user_id,
        issued_at=as_utc(row.issued_at),
        expires_at=as_utc(row.expires_at),
        revoked=row.revoked,
        last_used_at=as_utc(row.last_used_at) if row.last_used_at else None,
        name=row.name,
    )


class SqlExtensionTokenStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, record: ExtensionTokenRecord) -> ExtensionTokenRecord:
        try:
            row = await extension_tokens_crud.create_extension_token(
                self.db,
                token_hash=record.token_hash,
                user_id=record.user_id,
                issued_at=record.issued_at,
                expires_at=record.expires_at,
                name=record.name,
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to persist extension token: %s", e)
            raise StorageError(str(e)) from e
        return _to_record(row)

    async def get(self, token_hash: str) -> Optional[ExtensionTokenRecord]:
        try:
            row = await extension_tokens_crud.get_extension_token(self.db, token_hash)
        except SQLAlchemyError as e:
            logger.error("Failed to read extension token: %s", e)
            raise StorageError(str(e)) from e
        return _to_record(row) if row else None

    async def mark_used(self, token_hash: str, used_at: datetime) -> None:
        try:
            await extension_tokens_crud.update_last_used(self.db, token_hash, used_at)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to update last_used_at: %s", e)
            raise StorageError(str(e)) from e

    async def revoke(self, token_hash: str) -> None:
        try:
            await extension_tokens_crud.revoke_extension_token(self.db, token_hash)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to revoke extension token: %s", e)
            raise StorageError(str(e)) from e

    async def delete_expired(self, now: datetime) -> int:
        try:
            return await extension_tokens_crud.delete_expired_tokens(self.db, now)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to purge expired extension tokens: %s", e)
            raise StorageError(str(e)) from e


class SqlUserDirectory:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_user_by_id(self, user_id: str) -> Optional[UserInfo]:
        try:
            user = await users_crud.get_user_by_id(self.db, user_id)
        except SQLAlchemyError as e:
            logger.error("Failed to look up user %s: %s", user_id, e)
            raise StorageError(str(e)) from e
        return UserInfo.model_validate(user) if user else None


class SqlPushSubscriptionStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def upsert(
        self,
        endpoint: str,
        keys: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        try:
            await push_subscriptions_crud.upsert_push_subscription(
                self.db, endpoint, keys=keys, user_id=user_id, user_agent=user_agent
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to save push subscription: %s", e)
            raise StorageError(str(e)) from e

    async def list_subscriptions(self, user_id: Optional[str] = None) -> List[PushSubscriptionRecord]:
        try:
            rows = await push_subscriptions_crud.get_push_subscriptions(self.db, user_id)
        except SQLAlchemyError as e:
            logger.error("Failed to list push subscriptions: %s", e)
            raise StorageError(str(e)) from e
        return [
            PushSubscriptionRecord(
                endpoint=row.endpoint,
                keys=row.keys,
                user_id=row.user_id,
                user_agent=row.user_agent,
            )
            for row in rows
        ]

    async def delete_by_endpoint(self, endpoint: str) -> None:
        try:
            await push_subscriptions_crud.delete_push_subscription(self.db, endpoint)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to delete push subscription: %s", e)
            raise StorageError(str(e)) from e
