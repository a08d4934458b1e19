# tests/test_app.py

import pytest
from sqlmodel import Session, select

from task_api import cli
from task_api.core.config import Settings
from task_api.core.errors import ConfigurationError
from task_api.db.session import create_db_engine
from task_api.models.user import Role, User
from task_api.stores import UserStore


def test_root_reports_service(client) -> None:
    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "service": "task-manager-api"}


def test_unknown_route_is_404_envelope(client) -> None:
    resp = client.get("/api/nothing-here")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Route not found: GET /api/nothing-here"}


def test_unsupported_method_is_404_envelope(client) -> None:
    resp = client.patch("/api/auth/login", json={})

    assert resp.status_code == 404
    assert resp.json()["error"] == "Route not found: PATCH /api/auth/login"


def test_missing_configuration_is_reported() -> None:
    settings = Settings(_env_file=None, DATABASE_URL=None, JWT_SECRET=None)

    with pytest.raises(ConfigurationError) as excinfo:
        settings.check_required()

    assert "DATABASE_URL" in str(excinfo.value)
    assert "JWT_SECRET" in str(excinfo.value)


def test_cors_origins_are_split() -> None:
    settings = Settings(_env_file=None, CORS_ORIGINS="http://localhost:3000, http://127.0.0.1:3000")

    assert settings.cors_origins == ["http://localhost:3000", "http://127.0.0.1:3000"]


def test_password_hashed_once_and_only_when_changed(app, client) -> None:
    with Session(app.state.engine) as session:
        users = UserStore(session)
        user = users.create(email="ana@mail.com", password="secret1")
        first_hash = user.password

        user.name = "Ana"
        user = users.save(user)
        assert user.password == first_hash

        user.password = "another1"
        user = users.save(user)
        assert user.password != first_hash
        assert user.password != "another1"


def test_cli_creates_admin(settings) -> None:
    code = cli.main(
        ["create-user", "--email", "Boss@Mail.com", "--password", "secret1", "--role", "admin"],
        settings=settings,
    )

    assert code == 0

    engine = create_db_engine(settings.DATABASE_URL)
    with Session(engine) as session:
        user = session.exec(select(User).where(User.email == "boss@mail.com")).one()
        assert user.role == Role.admin
        assert user.password != "secret1"
    engine.dispose()


def test_cli_rejects_duplicate_email(settings) -> None:
    argv = ["create-user", "--email", "boss@mail.com", "--password", "secret1"]

    assert cli.main(argv, settings=settings) == 0
    assert cli.main(argv, settings=settings) == 1


def test_cli_validates_input(settings) -> None:
    assert cli.main(["create-user", "--email", "nope", "--password", "123"], settings=settings) == 2
