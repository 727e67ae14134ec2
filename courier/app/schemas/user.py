"""
User Pydantic schemas.
"""

from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional, List
from courier.app.models.enums import UserRole
from courier.app.schemas.common import ActionResponse


class UserCreate(BaseModel):
    """
    Schema for first sign-in registration.

    Role defaults to ``user``; privileged roles cannot be self-assigned.
    """
    email: EmailStr = Field(..., description="User email address")
    role: Optional[UserRole] = Field(default=UserRole.USER)
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class UserResponse(BaseModel):
    id: int
    email: str
    role: UserRole
    created_at: datetime
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserCreatedResponse(ActionResponse):
    inserted_id: int = Field(..., alias="insertedId")

    class Config:
        populate_by_name = True


class UserSearchResponse(ActionResponse):
    count: int
    users: List[UserResponse]


class RoleResponse(ActionResponse):
    role: UserRole


class RoleChangeResponse(ActionResponse):
    email: str
    role: UserRole
