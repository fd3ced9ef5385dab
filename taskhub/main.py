"""FastAPI application wiring for the task tracker."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
import redis
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api import auth, tasks, users
from .api.errors import install_error_handlers
from .config import Settings, get_settings
from .domain.service import AccountService
from .domain.task_service import TaskService
from .repository import AccountRepository, TaskRepository
from .schema import apply_schema
from .security.passwords import PasswordHasher
from .security.rate_limiter import SlidingWindowRateLimiter
from .security.redis_rate_limiter import RedisSlidingWindowRateLimiter
from .security.tokens import TokenIssuer

logger = logging.getLogger(__name__)


def build_rate_limiter(settings: Settings) -> SlidingWindowRateLimiter | RedisSlidingWindowRateLimiter:
    """Instantiate the configured throttle backend, preferring Redis when configured."""
    if settings.rate_limit_backend == "redis" and settings.redis_url:
        client = redis.from_url(settings.redis_url)
        client.ping()
        logger.info("rate limiter configured for redis backend")
        return RedisSlidingWindowRateLimiter(
            client,
            max_requests=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )

    logger.info("rate limiter using in-memory backend")
    return SlidingWindowRateLimiter(
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )


def build_services(
    settings: Settings, account_repository: AccountRepository, task_repository: TaskRepository
) -> tuple[AccountService, TaskService]:
    """Wire services around the secrets loaded once at start-up."""
    tokens = TokenIssuer(
        secret=settings.jwt_secret,
        issuer=settings.jwt_issuer,
        ttl_seconds=settings.jwt_ttl_seconds,
    )
    account_service = AccountService(
        account_repository,
        task_repository,
        hasher=PasswordHasher(),
        tokens=tokens,
        admin_code=settings.admin_code,
    )
    return account_service, TaskService(task_repository)


def include_routes(app: FastAPI) -> None:
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(tasks.router)
    install_error_handlers(app)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialise shared resources (Postgres pool, services) for the app lifecycle."""
        if settings.jwt_secret == "dev-secret-change-me":
            logger.warning("JWT_SECRET is the development default")
        pool = ConnectionPool(settings.database_url, open=False)
        pool.open()
        apply_schema(pool)
        app.state.pool = pool
        app.state.account_service, app.state.task_service = build_services(
            settings, AccountRepository(pool), TaskRepository(pool)
        )
        app.state.rate_limiter = build_rate_limiter(settings)
        try:
            yield
        finally:
            pool.close()

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    @app.get("/healthz", tags=["health"])
    def healthz() -> dict[str, str]:
        """Return a minimal readiness indicator used by orchestration systems."""
        return {"status": "ok"}

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    include_routes(app)
    return app


app = create_app()
