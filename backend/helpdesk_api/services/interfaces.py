"""
Storage capabilities consumed by the services.

Production code backs these with SQLAlchemy (see ``sql_stores``); tests
substitute in-memory fakes.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from ..api.schemas.user import UserInfo


@dataclass
class ExtensionTokenRecord:
    """Persisted state of one extension token, keyed by the token hash."""
    token_hash: str
    user_id: str
    issued_at: datetime
    expires_at: datetime
    revoked: bool = False
    last_used_at: Optional[datetime] = None
    name: Optional[str] = None


@runtime_checkable
class ExtensionTokenStore(Protocol):
    async def create(self, record: ExtensionTokenRecord) -> ExtensionTokenRecord:
        ...

    async def get(self, token_hash: str) -> Optional[ExtensionTokenRecord]:
        ...

    async def mark_used(self, token_hash: str, used_at: datetime) -> None:
        ...

    async def revoke(self, token_hash: str) -> None:
        ...

    async def delete_expired(self, now: datetime) -> int:
        ...


@runtime_checkable
class UserDirectory(Protocol):
    async def find_user_by_id(self, user_id: str) -> Optional[UserInfo]:
        ...


@dataclass
class PushSubscriptionRecord:
    endpoint: str
    keys: Optional[Dict[str, Any]] = None
    user_id: Optional[str] = None
    user_agent: Optional[str] = None


@runtime_checkable
class PushSubscriptionStore(Protocol):
    async def upsert(
        self,
        endpoint: str,
        keys: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        ...

    async def list_subscriptions(self, user_id: Optional[str] = None) -> List[PushSubscriptionRecord]:
        ...

    async def delete_by_endpoint(self, endpoint: str) -> None:
        ...
