from sqlmodel import SQLModel, Field, Relationship
from typing import Optional
from datetime import datetime
import uuid

from .user import utcnow


class Task(SQLModel, table=True):
    __tablename__ = "tasks"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    owner_id: uuid.UUID = Field(foreign_key="users.id", index=True, nullable=False)
    title: str = Field(nullable=False)
    # The remaining fields accept an explicit null from a partial update.
    description: Optional[str] = Field(default="")
    cost: Optional[float] = Field(default=0)
    hours_estimated: Optional[float] = Field(default=0)
    completed: Optional[bool] = Field(default=False)
    # URL or inline base64 payload
    image: Optional[str] = Field(default="")

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    # Relationship to owner
    owner: Optional["User"] = Relationship(back_populates="tasks")
