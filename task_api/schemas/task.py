from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime
import uuid

from ..models.user import Role


class TaskBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: Optional[str] = None
    cost: Optional[float] = None
    hours_estimated: Optional[float] = None
    completed: Optional[bool] = None
    image: Optional[str] = None
    created_at: datetime = Field(
        validation_alias=AliasChoices("created_at", "createdAt"), serialization_alias="createdAt"
    )
    updated_at: datetime = Field(
        validation_alias=AliasChoices("updated_at", "updatedAt"), serialization_alias="updatedAt"
    )


class TaskRead(TaskBase):
    owner_id: uuid.UUID = Field(
        validation_alias=AliasChoices("owner_id", "owner"), serialization_alias="owner"
    )


class TaskOwner(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    role: Role


class AdminTaskRead(TaskBase):
    # Missing only if the owner row vanished between the two cascade steps
    owner: Optional[TaskOwner] = None


class TaskResponse(BaseModel):
    success: bool = True
    task: TaskRead


class TaskListResponse(BaseModel):
    success: bool = True
    count: int
    tasks: List[TaskRead]


class AdminTaskListResponse(BaseModel):
    success: bool = True
    count: int
    tasks: List[AdminTaskRead]


class TaskStatsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    completed: int
    pending: int
    total_cost: float = Field(
        validation_alias=AliasChoices("total_cost", "totalCost"), serialization_alias="totalCost"
    )
    total_hours: float = Field(
        validation_alias=AliasChoices("total_hours", "totalHours"), serialization_alias="totalHours"
    )


class TaskStatsResponse(BaseModel):
    success: bool = True
    stats: TaskStatsRead
