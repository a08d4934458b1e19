from fastapi import APIRouter, Depends, status
from typing import Any, Dict

from task_api.api.deps import get_current_identity, get_task_store
from task_api.api.validation import TASK_CREATE_RULES, TASK_IMAGE_RULES, TASK_UPDATE_RULES, validate_body
from task_api.core.errors import BadRequest, NotFound
from task_api.models.task import Task
from task_api.schemas.task import (
    TaskListResponse,
    TaskRead,
    TaskResponse,
    TaskStatsRead,
    TaskStatsResponse,
)
from task_api.schemas.user import Identity, MessageResponse
from task_api.stores import TaskStore, parse_object_id

# Every route here sits behind the auth stage
router = APIRouter(dependencies=[Depends(get_current_identity)])


def get_owned_task_or_404(task_id: str, identity: Identity, tasks: TaskStore) -> Task:
    task = tasks.get_owned(parse_object_id(task_id), identity.id)
    if task is None:
        raise NotFound("Task not found")
    return task


# Declared before /{task_id} so "stats" is not taken for an id
@router.get("/stats", response_model=TaskStatsResponse)
def get_task_stats(
    identity: Identity = Depends(get_current_identity),
    tasks: TaskStore = Depends(get_task_store),
):
    stats = tasks.stats_for_owner(identity.id)
    return TaskStatsResponse(stats=TaskStatsRead.model_validate(stats))


@router.get("", response_model=TaskListResponse)
def list_user_tasks(
    identity: Identity = Depends(get_current_identity),
    tasks: TaskStore = Depends(get_task_store),
):
    owned = tasks.list_for_owner(identity.id)
    return TaskListResponse(count=len(owned), tasks=[TaskRead.model_validate(t) for t in owned])


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    identity: Identity = Depends(get_current_identity),
    body: Dict[str, Any] = Depends(validate_body(TASK_CREATE_RULES)),
    tasks: TaskStore = Depends(get_task_store),
):
    # The owner always comes from the token, never from the body
    task = tasks.create(identity.id, **body)
    return TaskResponse(task=TaskRead.model_validate(task))


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: str,
    identity: Identity = Depends(get_current_identity),
    tasks: TaskStore = Depends(get_task_store),
):
    task = get_owned_task_or_404(task_id, identity, tasks)
    return TaskResponse(task=TaskRead.model_validate(task))


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: str,
    identity: Identity = Depends(get_current_identity),
    body: Dict[str, Any] = Depends(validate_body(TASK_UPDATE_RULES)),
    tasks: TaskStore = Depends(get_task_store),
):
    task = get_owned_task_or_404(task_id, identity, tasks)

    # Only the fields present in the body are written
    for key, value in body.items():
        setattr(task, key, value)
    task = tasks.save(task)
    return TaskResponse(task=TaskRead.model_validate(task))


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: str,
    identity: Identity = Depends(get_current_identity),
    tasks: TaskStore = Depends(get_task_store),
):
    task = get_owned_task_or_404(task_id, identity, tasks)
    tasks.delete(task)
    return MessageResponse(message="Task deleted")


@router.put("/{task_id}/image", response_model=TaskResponse)
def upload_image(
    task_id: str,
    identity: Identity = Depends(get_current_identity),
    body: Dict[str, Any] = Depends(validate_body(TASK_IMAGE_RULES)),
    tasks: TaskStore = Depends(get_task_store),
):
    task = get_owned_task_or_404(task_id, identity, tasks)

    image = body.get("image")
    if not image:
        raise BadRequest("Image is required")

    task.image = image
    task = tasks.save(task)
    return TaskResponse(task=TaskRead.model_validate(task))


@router.put("/{task_id}/image/reset", response_model=TaskResponse)
def reset_image(
    task_id: str,
    identity: Identity = Depends(get_current_identity),
    tasks: TaskStore = Depends(get_task_store),
):
    task = get_owned_task_or_404(task_id, identity, tasks)
    task.image = ""
    task = tasks.save(task)
    return TaskResponse(task=TaskRead.model_validate(task))
