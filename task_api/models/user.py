from sqlalchemy import event, inspect
from sqlmodel import SQLModel, Field, Relationship
from typing import List
from datetime import datetime, timezone
import uuid
from enum import Enum

from ..core.security import hash_password


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    user = "user"
    admin = "admin"


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(default="", nullable=False)
    email: str = Field(unique=True, index=True, nullable=False)
    # Always a bcrypt hash once flushed, see the listeners below.
    password: str = Field(nullable=False)
    role: Role = Field(default=Role.user, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    # Relationship to tasks
    tasks: List["Task"] = Relationship(back_populates="owner")


@event.listens_for(User, "before_insert")
def _hash_password_on_insert(mapper, connection, target: User) -> None:
    target.password = hash_password(target.password)


@event.listens_for(User, "before_update")
def _hash_password_on_change(mapper, connection, target: User) -> None:
    # Only a newly assigned plaintext is hashed; name/email/role updates
    # leave the stored hash alone.
    if inspect(target).attrs.password.history.has_changes():
        target.password = hash_password(target.password)
