# tests/test_admin.py

import uuid

from sqlmodel import Session, select

from task_api.models.task import Task
from task_api.models.user import User

from .helpers import PASSWORD


def me(client, headers):
    return client.get("/api/auth/me", headers=headers).json()["user"]


def test_admin_routes_require_auth(client) -> None:
    resp = client.get("/api/admin/users")

    assert resp.status_code == 401


def test_admin_routes_forbid_regular_users(client, auth_headers) -> None:
    headers = auth_headers("ana@mail.com")

    for resp in (
        client.get("/api/admin/users", headers=headers),
        client.get("/api/admin/tasks", headers=headers),
        client.delete(f"/api/admin/users/{uuid.uuid4()}", headers=headers),
        client.put(f"/api/admin/users/{uuid.uuid4()}/role", json={"role": "admin"}, headers=headers),
    ):
        assert resp.status_code == 403
        assert resp.json() == {"success": False, "error": "Forbidden: insufficient permissions"}


def test_list_all_users_newest_first_without_passwords(client, admin_headers, register) -> None:
    register("ana@mail.com", name="Ana")
    register("bob@mail.com", name="Bob")

    resp = client.get("/api/admin/users", headers=admin_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 3
    assert [u["email"] for u in body["users"]] == ["bob@mail.com", "ana@mail.com", "root@mail.com"]
    for user in body["users"]:
        assert set(user) == {"id", "name", "email", "role", "createdAt"}


def test_list_all_tasks_includes_owner(client, admin_headers, auth_headers) -> None:
    ana = auth_headers("ana@mail.com")
    bob = auth_headers("bob@mail.com")
    client.post("/api/tasks", json={"title": "Ana's task"}, headers=ana)
    client.post("/api/tasks", json={"title": "Bob's task"}, headers=bob)

    resp = client.get("/api/admin/tasks", headers=admin_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 2
    assert [t["title"] for t in body["tasks"]] == ["Bob's task", "Ana's task"]
    owner = body["tasks"][0]["owner"]
    assert owner["email"] == "bob@mail.com"
    assert owner["role"] == "user"
    assert "password" not in owner


def test_delete_user_cascades_tasks(app, client, admin_headers, auth_headers) -> None:
    ana = auth_headers("ana@mail.com")
    ana_id = me(client, ana)["id"]
    client.post("/api/tasks", json={"title": "One"}, headers=ana)
    client.post("/api/tasks", json={"title": "Two"}, headers=ana)
    bob = auth_headers("bob@mail.com")
    client.post("/api/tasks", json={"title": "Bob's"}, headers=bob)

    resp = client.delete(f"/api/admin/users/{ana_id}", headers=admin_headers)

    assert resp.status_code == 200
    assert resp.json()["success"] is True

    tasks = client.get("/api/admin/tasks", headers=admin_headers).json()["tasks"]
    assert [t["title"] for t in tasks] == ["Bob's"]
    # The deleted user's token no longer resolves to anyone
    assert client.get("/api/tasks", headers=ana).status_code == 401

    with Session(app.state.engine) as session:
        assert session.exec(select(Task).where(Task.owner_id == uuid.UUID(ana_id))).all() == []
        assert session.get(User, uuid.UUID(ana_id)) is None


def test_delete_unknown_user_is_404(client, admin_headers) -> None:
    resp = client.delete(f"/api/admin/users/{uuid.uuid4()}", headers=admin_headers)

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "User not found"}


def test_delete_malformed_id_is_400(client, admin_headers) -> None:
    resp = client.delete("/api/admin/users/12345", headers=admin_headers)

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid id"


def test_admin_cannot_delete_self(client, admin_headers) -> None:
    admin_id = me(client, admin_headers)["id"]

    resp = client.delete(f"/api/admin/users/{admin_id}", headers=admin_headers)

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "You cannot delete yourself"}


def test_admin_cannot_change_own_role(client, admin_headers) -> None:
    admin_id = me(client, admin_headers)["id"]

    resp = client.put(f"/api/admin/users/{admin_id}/role", json={"role": "user"}, headers=admin_headers)

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "You cannot change your own role"}


def test_change_role_promotes_user(client, admin_headers, register) -> None:
    registered = register("ana@mail.com")
    user_id = registered["user"]["id"]

    resp = client.put(f"/api/admin/users/{user_id}/role", json={"role": "admin"}, headers=admin_headers)

    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "admin"
    assert "password" not in resp.json()["user"]

    # Role is read from the store on each request, so the old token now passes the gate
    promoted = {"Authorization": f"Bearer {registered['token']}"}
    assert client.get("/api/admin/users", headers=promoted).status_code == 200
    # and the password hash survived the role change untouched
    login = client.post("/api/auth/login", json={"email": "ana@mail.com", "password": PASSWORD})
    assert login.status_code == 200


def test_change_role_rejects_unknown_role(client, admin_headers, register) -> None:
    user_id = register("ana@mail.com")["user"]["id"]

    for payload in ({"role": "superuser"}, {}, {"role": ["admin"]}):
        resp = client.put(f"/api/admin/users/{user_id}/role", json=payload, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == "role must be 'user' or 'admin'"


def test_change_role_unknown_user_is_404(client, admin_headers) -> None:
    resp = client.put(
        f"/api/admin/users/{uuid.uuid4()}/role", json={"role": "admin"}, headers=admin_headers
    )

    assert resp.status_code == 404
