# tests/conftest.py

from pathlib import Path
from typing import Callable, Dict, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlmodel import Session

from task_api.core.config import Settings
from task_api.main import create_app
from task_api.models.user import Role
from task_api.stores import UserStore

from .helpers import PASSWORD, bearer


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway SQLite file; never reads .env."""
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'tasks.db'}",
        JWT_SECRET="test-secret-key-0123456789abcdef0123",
        JWT_EXPIRES_IN="1h",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture()
def client(app: FastAPI):
    # Entering the context runs the lifespan: engine + tables
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db_session(app: FastAPI, client: TestClient):
    with Session(app.state.engine) as session:
        yield session


@pytest.fixture()
def register(client: TestClient) -> Callable[..., Dict]:
    """Register through the API and return the response body."""

    def _register(email: str, password: str = PASSWORD, name: Optional[str] = None) -> Dict:
        payload = {"email": email, "password": password}
        if name is not None:
            payload["name"] = name
        resp = client.post("/api/auth/register", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _register


@pytest.fixture()
def auth_headers(register) -> Callable[[str], Dict[str, str]]:
    def _headers(email: str) -> Dict[str, str]:
        return bearer(register(email)["token"])

    return _headers


@pytest.fixture()
def admin_headers(app: FastAPI, client: TestClient) -> Dict[str, str]:
    """An administrator created straight in the store, then logged in."""
    with Session(app.state.engine) as session:
        UserStore(session).create(email="root@mail.com", password=PASSWORD, name="Root", role=Role.admin)

    resp = client.post("/api/auth/login", json={"email": "root@mail.com", "password": PASSWORD})
    assert resp.status_code == 200, resp.text
    return bearer(resp.json()["token"])
