"""Pydantic schemas for User and admin API."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from api.v1.schemas.common import PageMeta
from domain.entities.user import User


class UserResponse(BaseModel):
    """Schema for a user account."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    display_name: str
    profile_image_url: Optional[str] = None
    is_pro: bool = False
    is_admin: bool = False
    is_banned: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            display_name=user.display_name,
            profile_image_url=user.profile_image_url,
            is_pro=user.is_pro,
            is_admin=user.is_admin,
            is_banned=user.is_banned,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserDetailResponse(BaseModel):
    """Schema for single user response."""

    data: UserResponse


class UserListResponse(BaseModel):
    """Schema for list of users response."""

    data: List[UserResponse]
    meta: PageMeta


class SetAdminRequest(BaseModel):
    """Schema for granting or revoking admin rights."""

    is_admin: bool


class AdminLogResponse(BaseModel):
    """Schema for an admin log entry."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    admin_id: UUID
    action: str
    resource_type: str
    resource_id: Optional[str] = None
    details: Optional[dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime


class AdminLogListResponse(BaseModel):
    """Schema for list of admin log entries response."""

    data: List[AdminLogResponse]
    meta: PageMeta
