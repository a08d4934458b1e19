# This file ensures both models are loaded together to resolve circular references
from .user import Role, User
from .task import Task

__all__ = ["Role", "User", "Task"]
