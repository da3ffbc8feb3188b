"""Pydantic schemas for extension token issuance and validation."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from .user import UserInfo


class _CamelModel(BaseModel):
    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class TokenInfo(_CamelModel):
    """Token metadata. Never contains the token string itself."""
    name: Optional[str] = None
    issued_at: datetime
    expires_at: datetime
    last_used_at: Optional[datetime] = None


class IssueTokenRequest(_CamelModel):
    """Schema for pairing a new extension."""
    name: Optional[str] = Field(None, max_length=100, description="Optional label (e.g., 'Chrome Extension')")


class IssueTokenResponse(_CamelModel):
    """Returned once at issuance; the only time the token string leaves the server."""
    success: bool = True
    token: str
    token_info: TokenInfo


class ValidateTokenResponse(_CamelModel):
    success: bool = True
    user: UserInfo
    token_info: TokenInfo
