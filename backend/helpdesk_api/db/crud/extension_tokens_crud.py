"""CRUD operations for extension tokens in the database."""
from typing import Optional
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete, update

from ..models.db_extension_token import ExtensionToken


async def create_extension_token(
    db: AsyncSession,
    token_hash: str,
    user_id: str,
    issued_at: datetime,
    expires_at: datetime,
    name: Optional[str] = None
) -> ExtensionToken:
    """Create a new extension token in the database."""
    extension_token = ExtensionToken(
        token_hash=token_hash,
        user_id=user_id,
        name=name,
        issued_at=issued_at,
        expires_at=expires_at,
        revoked=False
    )
    db.add(extension_token)
    await db.commit()
    await db.refresh(extension_token)
    return extension_token


async def get_extension_token(
    db: AsyncSession,
    token_hash: str
) -> Optional[ExtensionToken]:
    """Retrieve an extension token by its hash, revoked or not."""
    result = await db.execute(
        select(ExtensionToken).filter(ExtensionToken.token_hash == token_hash)
    )
    return result.scalar_one_or_none()


async def update_last_used(
    db: AsyncSession,
    token_hash: str,
    used_at: datetime
) -> None:
    """Update the last_used_at timestamp in a single statement."""
    await db.execute(
        update(ExtensionToken)
        .where(ExtensionToken.token_hash == token_hash)
        .values(last_used_at=used_at)
    )
    await db.commit()


async def revoke_extension_token(
    db: AsyncSession,
    token_hash: str
) -> int:
    """Mark a token as revoked. Returns the number of rows that changed state."""
    result = await db.execute(
        update(ExtensionToken)
        .where(ExtensionToken.token_hash == token_hash, ExtensionToken.revoked.is_(False))
        .values(revoked=True)
    )
    await db.commit()
    return result.rowcount


async def delete_expired_tokens(
    db: AsyncSession,
    now: datetime
) -> int:
    """Delete tokens whose expiry has passed."""
    result = await db.execute(
        delete(ExtensionToken).where(ExtensionToken.expires_at <= now)
    )
    await db.commit()
    return result.rowcount
