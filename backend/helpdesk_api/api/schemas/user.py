"""Pydantic schemas for user records exposed to the extension."""
from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from ...core.enums import UserRole


class UserInfo(BaseModel):
    """Public view of a helpdesk account."""
    id: str
    email: str
    full_name: Optional[str] = None
    role: UserRole = UserRole.CLIENT
    is_active: bool = True

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True
