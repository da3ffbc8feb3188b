"""
Services module for the helpdesk backend.
Contains business logic and storage adapters.
"""
from .extension_token_service import ExtensionTokenService, IssuedToken, ValidatedToken, hash_token
from .interfaces import ExtensionTokenRecord, ExtensionTokenStore, UserDirectory, PushSubscriptionStore, PushSubscriptionRecord
from .push_notification_service import PushNotificationService, PushSendResult
from .sql_stores import SqlExtensionTokenStore, SqlUserDirectory, SqlPushSubscriptionStore

__all__ = [
    # Extension tokens
    "ExtensionTokenService",
    "IssuedToken",
    "ValidatedToken",
    "hash_token",
    # Storage capabilities
    "ExtensionTokenRecord",
    "ExtensionTokenStore",
    "UserDirectory",
    "PushSubscriptionStore",
    "PushSubscriptionRecord",
    # Web push
    "PushNotificationService",
    "PushSendResult",
    # SQLAlchemy adapters
    "SqlExtensionTokenStore",
    "SqlUserDirectory",
    "SqlPushSubscriptionStore",
]
