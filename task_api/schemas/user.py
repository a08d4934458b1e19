from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import List
from datetime import datetime
import uuid

from ..models.user import Role


class UserPublic(BaseModel):
    """Every user payload sent to clients. Deliberately has no password field."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    role: Role


class UserListItem(UserPublic):
    created_at: datetime = Field(
        validation_alias=AliasChoices("created_at", "createdAt"), serialization_alias="createdAt"
    )


class Identity(UserPublic):
    """The caller as resolved by the auth stage."""


class AuthResponse(BaseModel):
    success: bool = True
    token: str
    user: UserPublic


class UserResponse(BaseModel):
    success: bool = True
    user: UserPublic


class IdentityResponse(BaseModel):
    success: bool = True
    user: Identity


class UserListResponse(BaseModel):
    success: bool = True
    count: int
    users: List[UserListItem]


class MessageResponse(BaseModel):
    success: bool = True
    message: str
