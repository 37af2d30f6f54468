"""
Pydantic models for User.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from carp.utils.constants import UserRole, UserStatus


class UserBase(BaseModel):
    email: str = Field(..., max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)


class UserPydModel(UserBase):
    """Model for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    role: UserRole
    status: UserStatus
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class UserStatusUpdate(BaseModel):
    status: UserStatus = Field(..., examples=["suspended"])


class UserListResponse(BaseModel):
    users: list[UserPydModel]
    total: int
    skip: int
    limit: int
