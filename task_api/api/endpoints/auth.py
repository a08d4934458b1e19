import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from task_api.api.deps import get_app_settings, get_current_identity, get_user_store
from task_api.api.validation import (
    CHANGE_PASSWORD_RULES,
    LOGIN_RULES,
    PROFILE_RULES,
    REGISTER_RULES,
    validate_body,
)
from task_api.core.config import Settings
from task_api.core.errors import Conflict, NotFound, Unauthorized
from task_api.core.security import issue_token, verify_password
from task_api.schemas.user import (
    AuthResponse,
    Identity,
    IdentityResponse,
    MessageResponse,
    UserPublic,
    UserResponse,
)
from task_api.stores import UserStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: Dict[str, Any] = Depends(validate_body(REGISTER_RULES)),
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_app_settings),
):
    # Check if user exists
    if users.get_by_email(body["email"]) is not None:
        raise Conflict("Email already registered")

    # Create new user; the model listener hashes the password before insert
    user = users.create(
        name=body.get("name", ""),
        email=body["email"],
        password=body["password"],
    )
    logger.info("Registered user %s", user.id)

    return AuthResponse(token=issue_token(user, settings), user=UserPublic.model_validate(user))


@router.post("/login", response_model=AuthResponse)
def login(
    body: Dict[str, Any] = Depends(validate_body(LOGIN_RULES)),
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_app_settings),
):
    user = users.get_by_email(body["email"])

    # Same answer for an unknown email and a wrong password
    if user is None or not verify_password(body["password"], user.password):
        logger.warning("Failed login attempt for %s", body["email"])
        raise Unauthorized("Invalid credentials")

    return AuthResponse(token=issue_token(user, settings), user=UserPublic.model_validate(user))


@router.get("/me", response_model=IdentityResponse)
def get_current_user_profile(identity: Identity = Depends(get_current_identity)):
    return IdentityResponse(user=identity)


@router.put("/profile", response_model=UserResponse)
def update_profile(
    identity: Identity = Depends(get_current_identity),
    body: Dict[str, Any] = Depends(validate_body(PROFILE_RULES)),
    users: UserStore = Depends(get_user_store),
):
    email = body.get("email")
    if email and users.email_taken(email, exclude_id=identity.id):
        raise Conflict("Email already in use")

    user = users.get(identity.id)
    if user is None:
        raise NotFound("User not found")

    for key, value in body.items():
        setattr(user, key, value)
    user = users.save(user)

    return UserResponse(user=UserPublic.model_validate(user))


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    identity: Identity = Depends(get_current_identity),
    body: Dict[str, Any] = Depends(validate_body(CHANGE_PASSWORD_RULES)),
    users: UserStore = Depends(get_user_store),
):
    user = users.get(identity.id)
    if user is None:
        raise NotFound("User not found")

    if not verify_password(body["currentPassword"], user.password):
        raise Unauthorized("Current password is incorrect")

    # Re-hashed by the before_update listener
    user.password = body["newPassword"]
    users.save(user)
    logger.info("Password changed for user %s", user.id)

    return MessageResponse(message="Password updated")
