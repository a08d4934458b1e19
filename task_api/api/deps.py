from typing import Callable, Iterable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from task_api.core.config import Settings, get_settings
from task_api.core.errors import Forbidden, InvalidToken, MalformedIdentifier, Unauthorized
from task_api.core.security import verify_token
from task_api.db.session import get_session
from task_api.models.user import Role
from task_api.schemas.user import Identity
from task_api.stores import TaskStore, UserStore, parse_object_id

# Missing credentials are reported by get_current_identity, not by HTTPBearer
security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_user_store(session: Session = Depends(get_session)) -> UserStore:
    return UserStore(session)


def get_task_store(session: Session = Depends(get_session)) -> TaskStore:
    return TaskStore(session)


def get_current_identity(
    request: Request,
    token: Optional[HTTPAuthorizationCredentials] = Depends(security),
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_app_settings),
) -> Identity:
    """Auth stage: bearer token -> live user -> identity on ``request.state``."""
    if token is None:
        raise Unauthorized("Not authorized: missing token")

    try:
        claims = verify_token(token.credentials, settings)
        user_id = parse_object_id(claims.user_id)
    except (InvalidToken, MalformedIdentifier) as exc:
        raise Unauthorized("Not authorized: invalid or expired token") from exc

    user = users.get(user_id)
    if user is None:
        raise Unauthorized("Not authorized: user no longer exists")

    identity = Identity.model_validate(user)
    request.state.identity = identity
    return identity


def check_role(identity: Optional[Identity], allowed: Iterable[Role]) -> None:
    if identity is None:
        raise Unauthorized()
    if identity.role not in set(allowed):
        raise Forbidden()


def require_roles(*roles: Role) -> Callable:
    """Role-gate stage; must be listed after the auth stage."""

    def guard(request: Request) -> None:
        check_role(getattr(request.state, "identity", None), roles)

    return guard


require_admin = require_roles(Role.admin)
