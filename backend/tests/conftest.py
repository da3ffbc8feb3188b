"""
Test configuration.

The storage capabilities are replaced by in-memory fakes through
``app.dependency_overrides`` so no database is touched by the API tests.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import pytest
from fastapi.testclient import TestClient

from helpdesk_api.api.dependencies import get_extension_token_service, get_push_subscription_store
from helpdesk_api.api.schemas.user import UserInfo
from helpdesk_api.core.exceptions import StorageError
from helpdesk_api.main import app
from helpdesk_api.services.extension_token_service import ExtensionTokenService
from helpdesk_api.services.interfaces import ExtensionTokenRecord, PushSubscriptionRecord


class FakeClock:
    """Controllable replacement for utc_now."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class InMemoryExtensionTokenStore:
    def __init__(self):
        self.rows: Dict[str, ExtensionTokenRecord] = {}
        self.calls = 0
        self.fail_with: Optional[str] = None

    def _touch(self):
        self.calls += 1
        if self.fail_with:
            raise StorageError(self.fail_with)

    async def create(self, record):
        self._touch()
        self.rows[record.token_hash] = record
        return record

    async def get(self, token_hash):
        self._touch()
        row = self.rows.get(token_hash)
        if row is None:
            return None
        return ExtensionTokenRecord(**vars(row))

    async def mark_used(self, token_hash, used_at):
        self._touch()
        if token_hash in self.rows:
            self.rows[token_hash].last_used_at = used_at

    async def revoke(self, token_hash):
        self._touch()
        if token_hash in self.rows:
            self.rows[token_hash].revoked = True

    async def delete_expired(self, now):
        self._touch()
        expired = [key for key, row in self.rows.items() if row.expires_at <= now]
        for key in expired:
            del self.rows[key]
        return len(expired)


class InMemoryUserDirectory:
    def __init__(self):
        self.users: Dict[str, UserInfo] = {}

    def add(self, user_id: str, email: Optional[str] = None, **fields) -> UserInfo:
        user = UserInfo(id=user_id, email=email or f"{user_id.lower()}@example.com", **fields)
        self.users[user_id] = user
        return user

    async def find_user_by_id(self, user_id):
        return self.users.get(user_id)


class InMemoryPushSubscriptionStore:
    def __init__(self):
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.fail_with: Optional[str] = None

    async def upsert(self, endpoint, keys=None, user_id=None, user_agent=None):
        if self.fail_with:
            raise StorageError(self.fail_with)
        self.rows[endpoint] = {"keys": keys, "user_id": user_id, "user_agent": user_agent}

    async def list_subscriptions(self, user_id=None):
        if self.fail_with:
            raise StorageError(self.fail_with)
        return [
            PushSubscriptionRecord(endpoint=endpoint, **row)
            for endpoint, row in self.rows.items()
            if user_id is None or row["user_id"] == user_id
        ]

    async def delete_by_endpoint(self, endpoint):
        if self.fail_with:
            raise StorageError(self.fail_with)
        self.rows.pop(endpoint, None)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def token_store():
    return InMemoryExtensionTokenStore()


@pytest.fixture
def users():
    directory = InMemoryUserDirectory()
    directory.add("U1", full_name="Ursula One", role="agent")
    return directory


@pytest.fixture
def push_store():
    return InMemoryPushSubscriptionStore()


@pytest.fixture
def service(token_store, users, clock):
    return ExtensionTokenService(token_store, users, ttl=timedelta(hours=1), clock=clock)


@pytest.fixture
def client(service, push_store):
    """TestClient with fakes wired in. Lifespan (DB + scheduler) is not started."""
    app.dependency_overrides[get_extension_token_service] = lambda: service
    app.dependency_overrides[get_push_subscription_store] = lambda: push_store
    yield TestClient(app)
    app.dependency_overrides.clear()
