"""
Extension token service.

Turns a logged-in web session into a short-lived bearer token the browser
extension can present, and validates such tokens on every request.
"""
import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from ..api.schemas.extension_token import TokenInfo
from ..api.schemas.user import UserInfo
from ..config import settings
from ..core.enums import ValidationFailure
from ..core.exceptions import AuthFailure
from .interfaces import ExtensionTokenRecord, ExtensionTokenStore, UserDirectory

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def hash_token(token: str) -> str:
    """SHA-256 of the token string, the only form that is persisted."""
    return hashlib.sha256(token.encode()).hexdigest()


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _token_info(record: ExtensionTokenRecord) -> TokenInfo:
    return TokenInfo(
        name=record.name,
        issued_at=record.issued_at,
        expires_at=record.expires_at,
        last_used_at=record.last_used_at,
    )


@dataclass
class IssuedToken:
    token: str
    token_info: TokenInfo


@dataclass
class ValidatedToken:
    user: UserInfo
    token_info: TokenInfo


class ExtensionTokenService:
    """Issue, validate and revoke extension tokens."""

    def __init__(
        self,
        store: ExtensionTokenStore,
        users: UserDirectory,
        ttl: Optional[timedelta] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.users = users
        if ttl is None:
            ttl = timedelta(minutes=settings.EXTENSION_TOKEN_TTL_MINUTES)
        if ttl <= timedelta(0):
            raise ValueError("Extension token TTL must be positive")
        self.ttl = ttl
        self.clock = clock

    @staticmethod
    def generate_token() -> str:
        """256 random bits, hex encoded, with a recognizable prefix."""
        return f"{settings.EXTENSION_TOKEN_PREFIX}{secrets.token_hex(32)}"

    async def issue(self, user_id: str, name: Optional[str] = None) -> IssuedToken:
        """
        Create a token for ``user_id`` valid for the configured TTL.

        Raises StorageError if the token cannot be persisted.
        """
        token = self.generate_token()
        now = self.clock()
        record = await self.store.create(
            ExtensionTokenRecord(
                token_hash=hash_token(token),
                user_id=user_id,
                issued_at=now,
                expires_at=now + self.ttl,
                revoked=False,
                name=name,
            )
        )
        logger.info("Issued extension token for user %s (expires %s)", user_id, record.expires_at)
        return IssuedToken(token=token, token_info=_token_info(record))

    async def validate(self, token: str) -> ValidatedToken:
        """
        Check a token and return its owner.

        Expiry is checked before revocation, so an expired token reports
        Expired whatever its revoked flag. Raises AuthFailure with the
        matching ValidationFailure otherwise.
        """
        token_hash = hash_token(token)
        record = await self.store.get(token_hash)
        if record is None:
            raise AuthFailure(ValidationFailure.NOT_FOUND)

        now = self.clock()
        if now >= as_utc(record.expires_at):
            raise AuthFailure(ValidationFailure.EXPIRED)
        if record.revoked:
            raise AuthFailure(ValidationFailure.REVOKED)

        user = await self.users.find_user_by_id(record.user_id)
        if user is None:
            logger.warning("Extension token references missing user %s", record.user_id)
            raise AuthFailure(ValidationFailure.DANGLING_USER)

        await self.store.mark_used(token_hash, now)
        record.last_used_at = now
        return ValidatedToken(user=user, token_info=_token_info(record))

    async def revoke(self, token: str) -> None:
        """Revoke a token. Unknown or already revoked tokens are left as they are."""
        await self.store.revoke(hash_token(token))

    async def purge_expired(self) -> int:
        """Delete every token whose expiry has passed."""
        return await self.store.delete_expired(self.clock())
