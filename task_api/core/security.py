from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import re
from typing import Any, Dict, Union

import jwt
from passlib.context import CryptContext

from .config import Settings
from .errors import ConfigurationError, InvalidToken

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_LIFETIME_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_LIFETIME_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: str
    role: str
    expires_at: datetime


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def parse_lifetime(value: Union[str, int]) -> timedelta:
    """Turn ``"7d"``, ``"12h"``, ``"30m"``, ``"45s"`` or ``"3600"`` into a timedelta."""
    match = _LIFETIME_RE.match(str(value))
    if match is None or int(match.group(1)) <= 0:
        raise ConfigurationError(f"Invalid token lifetime: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_LIFETIME_UNITS[unit]: int(amount)})


# JWT token functions
def issue_token(user: Any, settings: Settings) -> str:
    """Sign ``{userId, email, role}`` for ``user`` with the configured lifetime."""
    if not settings.JWT_SECRET:
        raise ConfigurationError("JWT_SECRET is not configured")

    now = datetime.now(timezone.utc)
    expire = now + parse_lifetime(settings.JWT_EXPIRES_IN)
    payload: Dict[str, Any] = {
        "userId": str(user.id),
        "email": user.email,
        "role": getattr(user.role, "value", user.role),
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str, settings: Settings) -> TokenClaims:
    if not settings.JWT_SECRET:
        raise ConfigurationError("JWT_SECRET is not configured")
    if not token:
        raise InvalidToken()

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "userId"]},
        )
    except jwt.exceptions.PyJWTError as exc:
        raise InvalidToken() from exc

    return TokenClaims(
        user_id=str(payload["userId"]),
        email=payload.get("email", ""),
        role=payload.get("role", ""),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
