# tests/test_deps.py

import uuid

import pytest

from task_api.api.deps import check_role
from task_api.core.errors import Forbidden, Unauthorized
from task_api.models.user import Role
from task_api.schemas.user import Identity


def identity(role: Role) -> Identity:
    return Identity(id=uuid.uuid4(), name="", email="ana@mail.com", role=role)


def test_role_gate_without_identity_is_unauthorized() -> None:
    with pytest.raises(Unauthorized):
        check_role(None, {Role.admin})


def test_role_gate_rejects_role_outside_allowed_set() -> None:
    with pytest.raises(Forbidden):
        check_role(identity(Role.user), {Role.admin})


@pytest.mark.parametrize("role", [Role.user, Role.admin])
def test_role_gate_accepts_members(role: Role) -> None:
    check_role(identity(role), {Role.user, Role.admin})
