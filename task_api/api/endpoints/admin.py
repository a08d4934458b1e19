import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from task_api.api.deps import get_current_identity, get_task_store, get_user_store, require_admin
from task_api.core.errors import BadRequest, NotFound
from task_api.models.user import Role
from task_api.schemas.task import AdminTaskListResponse, AdminTaskRead
from task_api.schemas.user import (
    Identity,
    MessageResponse,
    UserListItem,
    UserListResponse,
    UserPublic,
    UserResponse,
)
from task_api.stores import TaskStore, UserStore, parse_object_id

logger = logging.getLogger(__name__)

# Auth first, then the role gate, for every admin route
router = APIRouter(dependencies=[Depends(get_current_identity), Depends(require_admin)])


@router.get("/users", response_model=UserListResponse)
def list_all_users(users: UserStore = Depends(get_user_store)):
    everyone = users.list_all()
    return UserListResponse(
        count=len(everyone),
        users=[UserListItem.model_validate(u) for u in everyone],
    )


@router.get("/tasks", response_model=AdminTaskListResponse)
def list_all_tasks(tasks: TaskStore = Depends(get_task_store)):
    everything = tasks.list_all_with_owner()
    return AdminTaskListResponse(
        count=len(everything),
        tasks=[AdminTaskRead.model_validate(t) for t in everything],
    )


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    identity: Identity = Depends(get_current_identity),
    users: UserStore = Depends(get_user_store),
    tasks: TaskStore = Depends(get_task_store),
):
    target_id = parse_object_id(user_id)
    if target_id == identity.id:
        raise BadRequest("You cannot delete yourself")

    user = users.get(target_id)
    if user is None:
        raise NotFound("User not found")

    # Two separate commits: tasks first, then the user
    removed = tasks.delete_for_owner(user.id)
    users.delete(user)
    logger.info("Admin %s deleted user %s and %d task(s)", identity.id, user_id, removed)

    return MessageResponse(message="User and their tasks deleted")


@router.put("/users/{user_id}/role", response_model=UserResponse)
def change_user_role(
    user_id: str,
    body: Dict[str, Any] = Body(default_factory=dict),
    identity: Identity = Depends(get_current_identity),
    users: UserStore = Depends(get_user_store),
):
    target_id = parse_object_id(user_id)
    if target_id == identity.id:
        raise BadRequest("You cannot change your own role")

    role = body.get("role")
    if not isinstance(role, str) or role not in {r.value for r in Role}:
        raise BadRequest("role must be 'user' or 'admin'")

    user = users.get(target_id)
    if user is None:
        raise NotFound("User not found")

    user.role = Role(role)
    user = users.save(user)
    logger.info("Admin %s set role of user %s to %s", identity.id, user_id, role)

    return UserResponse(user=UserPublic.model_validate(user))
