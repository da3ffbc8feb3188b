from .db_user import User, UserSession
from .db_extension_token import ExtensionToken
from .db_push_subscription import PushSubscription

__all__ = [
    "User",
    "UserSession",
    "ExtensionToken",
    "PushSubscription",
]
