"""Create a user directly in the store.

Usage:
  python -m task_api.cli create-user --email admin@mail.com --password '...' --role admin

Registration over HTTP always yields role=user, so this is how the first
administrator comes to exist.
"""

import argparse
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv
from sqlmodel import Session

from task_api.api.validation import REGISTER_RULES, evaluate
from task_api.core.config import Settings, get_settings
from task_api.core.errors import ConfigurationError
from task_api.core.logging_setup import setup_logging
from task_api.db.session import create_db_engine, init_db
from task_api.models.user import Role
from task_api.stores import UserStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="task_api.cli")
    sub = ap.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-user", help="create a user account")
    create.add_argument("--email", required=True)
    create.add_argument("--password", required=True)
    create.add_argument("--name", default=None)
    create.add_argument("--role", choices=[r.value for r in Role], default=Role.user.value)
    return ap


def create_user(settings: Settings, *, email: str, password: str, name: Optional[str], role: str) -> int:
    body = {"email": email, "password": password}
    if name is not None:
        body["name"] = name
    cleaned, errors = evaluate(REGISTER_RULES, body)
    if errors:
        for err in errors:
            print(f"{err['field']}: {err['message']}", file=sys.stderr)
        return 2

    engine = create_db_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    try:
        init_db(engine)
        with Session(engine) as session:
            users = UserStore(session)
            if users.get_by_email(cleaned["email"]) is not None:
                print(f"Email already registered: {cleaned['email']}", file=sys.stderr)
                return 1
            user = users.create(
                name=cleaned.get("name", ""),
                email=cleaned["email"],
                password=cleaned["password"],
                role=Role(role),
            )
            logger.info("Created %s user %s", user.role.value, user.id)
            print(f"Created user {user.id} <{user.email}> role={user.role.value}")
    finally:
        engine.dispose()
    return 0


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    if not settings.DATABASE_URL:
        raise ConfigurationError("Missing required configuration: DATABASE_URL")

    if args.command == "create-user":
        return create_user(
            settings,
            email=args.email,
            password=args.password,
            name=args.name,
            role=args.role,
        )
    return 2


if __name__ == "__main__":
    sys.exit(main())
