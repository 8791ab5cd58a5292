"""
hipp_admin.api.app

FastAPI app factory for the HIPP admin service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Build the immutable auth objects (JWT config, password hasher/policy) once.
- Initialize and dispose shared infrastructure (DB engine/session factory, seed data).
- Map the domain error taxonomy to HTTP responses.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from hipp_admin.api.routers.auth import router as auth_router
from hipp_admin.api.routers.dev import router as dev_router
from hipp_admin.api.routers.health import router as health_router
from hipp_admin.api.routers.profile import router as profile_router
from hipp_admin.api.routers.roles import router as roles_router
from hipp_admin.api.routers.users import router as users_router
from hipp_admin.auth.jwt import JwtConfig
from hipp_admin.auth.passwords import PasswordHasher, PasswordPolicy
from hipp_admin.db.init_db import init_db
from hipp_admin.db.session import create_engine, create_sessionmaker, session_scope
from hipp_admin.errors import AdminServiceError
from hipp_admin.observability.logging import configure_logging, get_logger
from hipp_admin.observability.middleware import RequestContextMiddleware
from hipp_admin.services.seeding import seed_admin_user, seed_roles
from hipp_admin.settings import Settings

log = get_logger(__name__)


def build_jwt_config(settings: Settings) -> JwtConfig:
    return JwtConfig(
        alg=settings.jwt_alg,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        secret=settings.jwt_secret.get_secret_value(),
        ttl=timedelta(minutes=settings.jwt_expire_minutes),
    )


def build_password_policy(settings: Settings) -> PasswordPolicy:
    return PasswordPolicy(
        min_length=settings.password_min_length,
        require_digit=settings.password_require_digit,
        require_lowercase=settings.password_require_lowercase,
        require_uppercase=settings.password_require_uppercase,
        require_non_alphanumeric=settings.password_require_non_alphanumeric,
    )


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json=settings.log_json,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        try:
            if settings.env in ("dev", "test"):
                # Prod schema is managed by Alembic migrations.
                await init_db(engine)
            if settings.seed_on_startup:
                await _seed(app, settings)
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="HIPP Admin API",
        version="0.1.0",
        docs_url="/docs" if settings.env != "prod" else None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Built once; handlers read them from app.state.
    app.state.settings = settings
    app.state.jwt_config = build_jwt_config(settings)
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.password_policy = build_password_policy(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(AdminServiceError, _service_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(profile_router)
    app.include_router(users_router)
    app.include_router(roles_router)
    app.include_router(dev_router)

    return app


async def _seed(app: FastAPI, settings: Settings) -> None:
    async with session_scope(app.state.sessionmaker) as session:
        await seed_roles(session)
        if settings.seed_admin_password is None:
            log.warning("seed_admin_skipped", reason="no admin password configured")
            return
        await seed_admin_user(
            session,
            hasher=app.state.password_hasher,
            username=settings.seed_admin_username,
            email=settings.seed_admin_email,
            password=settings.seed_admin_password.get_secret_value(),
        )


async def _service_error_handler(request: Request, exc: AdminServiceError) -> JSONResponse:
    # Registered for AdminServiceError only; Starlette passes that instance.
    log.info("request_rejected", error=type(exc).__name__, status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Full detail goes to the logs only.
    log.exception("unhandled_error", error=type(exc).__name__)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# --- Module Notes -----------------------------------------------------------
# This file is intentionally small: app composition stays here; business logic stays
# in services and repositories.
