import uuid

from ..core.errors import MalformedIdentifier
from .task_store import TaskStats, TaskStore
from .user_store import UserStore


def parse_object_id(raw: str) -> uuid.UUID:
    """Parse a path identifier, rejecting anything that is not a UUID."""
    try:
        return uuid.UUID(str(raw))
    except ValueError as exc:
        raise MalformedIdentifier() from exc


__all__ = ["TaskStats", "TaskStore", "UserStore", "parse_object_id"]
