from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel

from peterparts.models.user import AuthProvider, Role


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys; accepts either case on input."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserBase(CamelModel):
    """Base user schema with common fields."""
    email: EmailStr
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class UserResponse(UserBase):
    """Schema for user response to client. Never carries provider secrets."""
    id: UUID
    role: Role
    provider: AuthProvider
    created_at: datetime
    updated_at: datetime


class UserListResponse(CamelModel):
    """Schema for listing users."""
    users: List[UserResponse]
