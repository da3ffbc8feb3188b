"""
FastAPI dependencies wiring the services to the request's database session.
Tests override these with in-memory fakes.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.database import get_db
from ..services.extension_token_service import ExtensionTokenService
from ..services.interfaces import PushSubscriptionStore
from ..services.push_notification_service import PushNotificationService
from ..services.sql_stores import SqlExtensionTokenStore, SqlPushSubscriptionStore, SqlUserDirectory


async def get_extension_token_service(db: AsyncSession = Depends(get_db)) -> ExtensionTokenService:
    return ExtensionTokenService(
        store=SqlExtensionTokenStore(db),
        users=SqlUserDirectory(db),
    )


async def get_push_subscription_store(db: AsyncSession = Depends(get_db)) -> PushSubscriptionStore:
    return SqlPushSubscriptionStore(db)


async def get_push_notification_service(
    store: PushSubscriptionStore = Depends(get_push_subscription_store),
) -> PushNotificationService:
    return PushNotificationService(store)
