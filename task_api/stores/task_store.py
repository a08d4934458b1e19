from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional
import uuid

from sqlalchemy import delete as sa_delete
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select, func

from ..models.task import Task


@dataclass
class TaskStats:
    total: int
    completed: int
    pending: int
    total_cost: float
    total_hours: float


class TaskStore:
    """Task queries. Everything except the admin helpers is scoped to an owner."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, owner_id: uuid.UUID, **fields: Any) -> Task:
        task = Task(owner_id=owner_id, **fields)
        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)
        return task

    def list_for_owner(self, owner_id: uuid.UUID) -> List[Task]:
        statement = (
            select(Task)
            .where(Task.owner_id == owner_id)
            .order_by(Task.created_at.desc())
        )
        return list(self.session.exec(statement).all())

    def get_owned(self, task_id: uuid.UUID, owner_id: uuid.UUID) -> Optional[Task]:
        # A task of another owner is reported exactly like a missing one
        statement = select(Task).where(Task.id == task_id, Task.owner_id == owner_id)
        return self.session.exec(statement).first()

    def save(self, task: Task) -> Task:
        task.updated_at = datetime.now(timezone.utc)
        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)
        return task

    def delete(self, task: Task) -> None:
        self.session.delete(task)
        self.session.commit()

    def delete_for_owner(self, owner_id: uuid.UUID) -> int:
        result = self.session.execute(sa_delete(Task).where(Task.owner_id == owner_id))
        self.session.commit()
        return result.rowcount

    def stats_for_owner(self, owner_id: uuid.UUID) -> TaskStats:
        total = self.session.exec(
            select(func.count(Task.id)).where(Task.owner_id == owner_id)
        ).one()

        completed = self.session.exec(
            select(func.count(Task.id)).where(
                Task.owner_id == owner_id,
                Task.completed == True,  # noqa: E712
            )
        ).one()

        total_cost, total_hours = self.session.exec(
            select(
                func.coalesce(func.sum(Task.cost), 0),
                func.coalesce(func.sum(Task.hours_estimated), 0),
            ).where(Task.owner_id == owner_id)
        ).one()

        return TaskStats(
            total=total,
            completed=completed,
            pending=total - completed,
            total_cost=total_cost,
            total_hours=total_hours,
        )

    def list_all_with_owner(self) -> List[Task]:
        statement = (
            select(Task)
            .options(selectinload(Task.owner))
            .order_by(Task.created_at.desc())
        )
        return list(self.session.exec(statement).all())
