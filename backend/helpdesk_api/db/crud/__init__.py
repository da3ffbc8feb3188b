"""
CRUD operations for database models.
"""
from . import users_crud
from . import extension_tokens_crud
from . import push_subscriptions_crud

__all__ = [
    "users_crud",
    "extension_tokens_crud",
    "push_subscriptions_crud",
]
