"""
Declarative request body rules.

Each route declares a tuple of ``Rule`` objects; ``validate_body`` turns it
into a FastAPI dependency that evaluates every rule against the JSON body
and either short-circuits with a 400 listing all ``{field, message}``
violations, or hands the handler a dict holding only the fields that were
sent, with normalized values.

Presence matters: a field missing from the body is missing from the result,
while an explicit ``null`` (where the rule allows it) is kept as ``None``.
"""

from dataclasses import dataclass
import json
import math
import re
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from email_validator import EmailNotValidError, validate_email
from fastapi import Request

from ..core.errors import RequestValidationFailed

STRING = "string"
EMAIL = "email"
NUMBER = "number"
BOOLEAN = "boolean"

_TRUE = {"true", "1"}
_FALSE = {"false", "0"}
_MISSING = object()

# Plain decimal notation only: no exponents, no inf/nan spellings
_NUMERIC = re.compile(r"^[+-]?(\d*\.)?\d+$")


class _Invalid(Exception):
    pass


@dataclass(frozen=True)
class Rule:
    field: str
    kind: str = STRING
    required: bool = False
    nullable: bool = False
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    trim: bool = True
    message: Optional[str] = None
    required_message: Optional[str] = None

    def error(self, default: str) -> Dict[str, str]:
        return {"field": self.field, "message": self.message or default}

    def missing(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.required_message or f"{self.field} is required"}

    def check(self, value: Any) -> Any:
        """Return the normalized value or raise ``_Invalid``."""
        if self.kind == STRING:
            return self._check_string(value)
        if self.kind == EMAIL:
            return _normalize_email(self._check_string(value))
        if self.kind == NUMBER:
            return _coerce_number(value)
        if self.kind == BOOLEAN:
            return _coerce_boolean(value)
        raise ValueError(f"unknown rule kind: {self.kind}")

    def _check_string(self, value: Any) -> str:
        if not isinstance(value, str):
            raise _Invalid()
        if self.trim:
            value = value.strip()
        if self.min_length is not None and len(value) < self.min_length:
            raise _Invalid()
        if self.max_length is not None and len(value) > self.max_length:
            raise _Invalid()
        return value


def _normalize_email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise _Invalid() from exc
    return value.lower()


def _coerce_number(value: Any) -> float:
    # bool is an int subclass but never a number here
    if isinstance(value, bool):
        raise _Invalid()
    if isinstance(value, str):
        if not _NUMERIC.fullmatch(value):
            raise _Invalid()
        value = float(value)
    elif isinstance(value, int):
        try:
            float(value)
        except OverflowError as exc:
            raise _Invalid() from exc
    elif not isinstance(value, float):
        raise _Invalid()
    if isinstance(value, float) and not math.isfinite(value):
        raise _Invalid()
    return value


def _coerce_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
    raise _Invalid()


def evaluate(rules: Sequence[Rule], body: Any) -> Tuple[Dict[str, Any], List[Dict[str, str]]]:
    """Apply ``rules`` to ``body``; returns ``(cleaned, errors)``."""
    if not isinstance(body, dict):
        return {}, [{"field": "body", "message": "Request body must be a JSON object"}]

    cleaned: Dict[str, Any] = {}
    errors: List[Dict[str, str]] = []
    for rule in rules:
        value = body.get(rule.field, _MISSING)
        if value is _MISSING:
            if rule.required:
                errors.append(rule.missing())
            continue
        if value is None:
            if rule.nullable:
                cleaned[rule.field] = None
            elif rule.required or rule.required_message:
                errors.append(rule.missing())
            else:
                errors.append(rule.error(f"{rule.field} is invalid"))
            continue
        try:
            cleaned[rule.field] = rule.check(value)
        except _Invalid:
            errors.append(rule.error(f"{rule.field} is invalid"))
    return cleaned, errors


def validate_body(rules: Sequence[Rule]) -> Callable:
    rules = tuple(rules)

    async def dependency(request: Request) -> Dict[str, Any]:
        raw = await request.body()
        try:
            body = json.loads(raw) if raw else {}
        except ValueError:
            raise RequestValidationFailed(
                [{"field": "body", "message": "Malformed JSON body"}]
            )
        cleaned, errors = evaluate(rules, body)
        if errors:
            raise RequestValidationFailed(errors)
        return cleaned

    return dependency


# --- Auth routes ---

REGISTER_RULES = (
    Rule("email", EMAIL, required=True, message="Invalid email"),
    Rule("password", STRING, required=True, min_length=6, trim=False,
         message="Password must be at least 6 characters"),
    Rule("name", STRING, min_length=2, message="Name must be at least 2 characters"),
)

LOGIN_RULES = (
    Rule("email", EMAIL, required=True, message="Invalid email"),
    Rule("password", STRING, required=True, min_length=1, trim=False,
         message="Password is required"),
)

PROFILE_RULES = (
    Rule("email", EMAIL, message="Invalid email"),
    Rule("name", STRING, min_length=2, message="Name must be at least 2 characters"),
)

CHANGE_PASSWORD_RULES = (
    Rule("currentPassword", STRING, required=True, min_length=1, trim=False,
         message="currentPassword is required"),
    Rule("newPassword", STRING, required=True, min_length=6, trim=False,
         message="newPassword must be at least 6 characters"),
)

# --- Task routes ---

TASK_CREATE_RULES = (
    Rule("title", STRING, required=True, min_length=2,
         message="title must be at least 2 characters", required_message="title is required"),
    Rule("description", STRING, max_length=500, message="description must be at most 500 characters"),
    Rule("cost", NUMBER, message="cost must be numeric"),
    Rule("hours_estimated", NUMBER, message="hours_estimated must be numeric"),
    Rule("completed", BOOLEAN, message="completed must be a boolean"),
    Rule("image", STRING, trim=False, message="image must be a string"),
)

# Partial update: nothing required; only description accepts an explicit null
TASK_UPDATE_RULES = (
    Rule("title", STRING, min_length=2,
         message="title must be at least 2 characters", required_message="title is required"),
    Rule("description", STRING, nullable=True, max_length=500,
         message="description must be at most 500 characters"),
    Rule("cost", NUMBER, message="cost must be numeric"),
    Rule("hours_estimated", NUMBER, message="hours_estimated must be numeric"),
    Rule("completed", BOOLEAN, message="completed must be a boolean"),
    Rule("image", STRING, trim=False, message="image must be a string"),
)

# Emptiness is reported by the handler as "Image is required"
TASK_IMAGE_RULES = (
    Rule("image", STRING, nullable=True, trim=False, message="image must be a string"),
)
