from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from taskhub.main import include_routes
from taskhub.security.rate_limiter import SlidingWindowRateLimiter

from .conftest import ADMIN_CODE, register


def _admin(client, email: str = "boss@example.com"):
    return register(client, email, name="The Boss", role="admin", admin_code=ADMIN_CODE)


def test_register_returns_token_and_public_user(api_client):
    response = api_client.post(
        "/api/auth/register",
        json={"name": "Ada Lovelace", "email": "Ada@Example.com", "password": "secret-pw"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["token"]
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "ada@example.com"
    assert body["user"]["role"] == "user"
    assert "password" not in str(body["user"]).lower()


def test_me_resolves_the_token_holder(api_client):
    user, headers = register(api_client, "me@example.com")

    response = api_client.get("/api/auth/me", headers=headers)

    assert response.status_code == 200
    assert response.json()["user"]["account_id"] == user["account_id"]


def test_missing_and_invalid_tokens_share_one_response(api_client):
    missing = api_client.get("/api/auth/me")
    garbage = api_client.get("/api/auth/me", headers={"Authorization": "Bearer nonsense"})
    wrong_scheme = api_client.get("/api/auth/me", headers={"Authorization": "Basic abc"})

    for response in (missing, garbage, wrong_scheme):
        assert response.status_code == 401
        assert response.json() == {"message": "Not authenticated"}
        assert response.headers["www-authenticate"] == "Bearer"


def test_deleted_account_token_looks_like_any_bad_token(api_client):
    _, headers = register(api_client, "leaving@example.com")
    assert api_client.delete("/api/users/profile", headers=headers).status_code == 200

    response = api_client.get("/api/auth/me", headers=headers)

    assert response.status_code == 401
    assert response.json() == {"message": "Not authenticated"}


def test_register_duplicate_email(api_client):
    register(api_client, "dup@example.com")

    response = api_client.post(
        "/api/auth/register",
        json={"name": "Second", "email": "DUP@example.com", "password": "secret-pw"},
    )

    assert response.status_code == 400
    assert response.json() == {"message": "Email already registered"}


def test_register_admin_with_wrong_code(api_client, services):
    response = api_client.post(
        "/api/auth/register",
        json={
            "name": "Sneaky",
            "email": "sneaky@example.com",
            "password": "secret-pw",
            "role": "admin",
            "admin_code": "guess",
        },
    )

    assert response.status_code == 403
    assert response.json() == {"message": "Invalid admin code"}
    assert services.account_repository.find_by_email("sneaky@example.com") is None


def test_register_validation_errors_are_listed_by_field(api_client):
    response = api_client.post(
        "/api/auth/register",
        json={"name": " A ", "email": "not-an-email", "password": "123"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation failed"
    assert {error["field"] for error in body["errors"]} == {"name", "email", "password"}


def test_login_with_unknown_email_or_wrong_password(api_client):
    register(api_client, "known@example.com")

    unknown = api_client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "secret-pw"})
    wrong = api_client.post("/api/auth/login", json={"email": "known@example.com", "password": "bad-password"})

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json() == {"message": "Invalid credentials"}


def test_login_success(api_client):
    user, _ = register(api_client, "known@example.com")

    response = api_client.post("/api/auth/login", json={"email": "KNOWN@example.com", "password": "secret-pw"})

    assert response.status_code == 200
    token = response.json()["token"]
    me = api_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["user"]["account_id"] == user["account_id"]


def test_profile_update_and_email_conflict(api_client):
    _, headers = register(api_client, "first@example.com")
    register(api_client, "second@example.com")

    conflict = api_client.put("/api/users/profile", json={"email": "second@example.com"}, headers=headers)
    assert conflict.status_code == 400
    assert conflict.json() == {"message": "Email is already taken"}

    updated = api_client.put("/api/users/profile", json={"name": "Renamed"}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["user"]["name"] == "Renamed"
    assert updated.json()["user"]["email"] == "first@example.com"


def test_profile_update_ignores_role_field(api_client):
    _, headers = register(api_client, "plain@example.com")

    response = api_client.put("/api/users/profile", json={"name": "Plain", "role": "admin"}, headers=headers)

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "user"


def test_statistics_require_admin(api_client):
    _, headers = register(api_client, "user@example.com")

    response = api_client.get("/api/users/statistics", headers=headers)

    assert response.status_code == 403
    assert response.json() == {"message": "Admin access required"}


def test_statistics_for_admin(api_client):
    user, user_headers = register(api_client, "u1@example.com")
    admin, admin_headers = _admin(api_client)
    for i in range(3):
        api_client.post("/api/tasks", json={"title": f"task {i}"}, headers=user_headers)

    response = api_client.get("/api/users/statistics", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["total_users"] == 2
    assert body["total_admins"] == 1
    counts = {entry["account_id"]: entry["task_count"] for entry in body["user_stats"]}
    assert counts == {user["account_id"]: 3, admin["account_id"]: 0}


def test_admin_cannot_delete_itself_via_admin_route(api_client):
    admin, headers = _admin(api_client)

    response = api_client.delete(f"/api/users/{admin['account_id']}", headers=headers)

    assert response.status_code == 400
    assert response.json() == {"message": "Admins cannot delete themselves"}
    assert api_client.get("/api/auth/me", headers=headers).status_code == 200


def test_admin_deletes_another_account_with_its_tasks(api_client, services):
    victim, victim_headers = register(api_client, "victim@example.com")
    bystander, bystander_headers = register(api_client, "bystander@example.com")
    api_client.post("/api/tasks", json={"title": "victim task"}, headers=victim_headers)
    api_client.post("/api/tasks", json={"title": "bystander task"}, headers=bystander_headers)
    _, admin_headers = _admin(api_client)

    response = api_client.delete(f"/api/users/{victim['account_id']}", headers=admin_headers)

    assert response.status_code == 200
    assert api_client.get("/api/auth/me", headers=victim_headers).status_code == 401
    assert list(services.task_repository.iter_owner_ids()) == [bystander["account_id"]]

    again = api_client.delete(f"/api/users/{victim['account_id']}", headers=admin_headers)
    assert again.status_code == 404
    assert again.json() == {"message": "User not found"}


def test_plain_user_cannot_delete_by_id(api_client):
    _, headers = register(api_client, "user@example.com")
    other, _ = register(api_client, "other@example.com")

    response = api_client.delete(f"/api/users/{other['account_id']}", headers=headers)

    assert response.status_code == 403


def test_login_is_throttled(services):
    app = FastAPI()
    include_routes(app)
    app.state.account_service = services.accounts
    app.state.task_service = services.tasks
    app.state.rate_limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=60)
    payload = {"email": "victim@example.com", "password": "guess-guess"}

    with TestClient(app) as client:
        first = client.post("/api/auth/login", json=payload)
        second = client.post("/api/auth/login", json=payload)
        third = client.post("/api/auth/login", json=payload)

    assert first.status_code == 401
    assert second.status_code == 401
    assert third.status_code == 429
    assert third.json()["detail"] == "rate limited"


def test_healthz_and_metrics():
    from taskhub.main import create_app

    # Without the context manager the lifespan (and its database pool) never starts.
    client = TestClient(create_app())
    assert client.get("/healthz").json() == {"status": "ok"}
    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "taskhub_auth_failures_total" in metrics.text
