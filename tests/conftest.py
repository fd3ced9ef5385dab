from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from taskhub.domain.service import AccountService
from taskhub.domain.task_service import TaskService
from taskhub.main import include_routes
from taskhub.security.passwords import PasswordHasher
from taskhub.security.rate_limiter import SlidingWindowRateLimiter
from taskhub.security.tokens import TokenIssuer

from .fakes import FakeAccountRepository, FakeClock, FakeStore, FakeTaskRepository

ADMIN_CODE = "open-sesame"
SECRET = "test-secret"
ISSUER = "taskhub.test"


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> FakeStore:
    return FakeStore(clock=clock)


@pytest.fixture()
def tokens(clock: FakeClock) -> TokenIssuer:
    return TokenIssuer(secret=SECRET, issuer=ISSUER, ttl_seconds=3600, clock=clock)


@pytest.fixture()
def services(store: FakeStore, tokens: TokenIssuer, clock: FakeClock) -> SimpleNamespace:
    """Account and task services wired to the in-memory repositories."""
    accounts = FakeAccountRepository(store)
    tasks = FakeTaskRepository(store)
    return SimpleNamespace(
        accounts=AccountService(
            accounts,
            tasks,
            hasher=PasswordHasher(),
            tokens=tokens,
            admin_code=ADMIN_CODE,
        ),
        tasks=TaskService(tasks, clock=clock),
        account_repository=accounts,
        task_repository=tasks,
    )


@pytest.fixture()
def api_client(services: SimpleNamespace):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    include_routes(app)
    app.state.account_service = services.accounts
    app.state.task_service = services.tasks
    app.state.rate_limiter = SlidingWindowRateLimiter(max_requests=1000, window_seconds=60)

    with TestClient(app) as client:
        yield client


def register(client: TestClient, email: str, *, name: str = "Test User", password: str = "secret-pw", **extra):
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password, **extra},
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return body["user"], {"Authorization": f"Bearer {body['token']}"}
