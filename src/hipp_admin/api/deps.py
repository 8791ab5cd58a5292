"""
hipp_admin.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings and DB sessions.
- Build request-scoped services from the shared objects on app.state.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hipp_admin.auth.deps import jwt_config_dep
from hipp_admin.auth.jwt import JwtConfig
from hipp_admin.auth.passwords import PasswordHasher, PasswordPolicy
from hipp_admin.services.auth_service import AuthService
from hipp_admin.services.role_service import RoleService
from hipp_admin.services.user_service import UserService
from hipp_admin.settings import Settings


def settings_dep(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[no-any-return]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # The sessionmaker is created on app startup in `hipp_admin.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[no-any-return]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed explicitly by the service layer.
    async with session_factory() as session:
        yield session


def password_hasher_dep(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher  # type: ignore[no-any-return]


def password_policy_dep(request: Request) -> PasswordPolicy:
    return request.app.state.password_policy  # type: ignore[no-any-return]


def user_service(
    session: AsyncSession = Depends(db_session),
    hasher: PasswordHasher = Depends(password_hasher_dep),
    policy: PasswordPolicy = Depends(password_policy_dep),
) -> UserService:
    return UserService(session=session, hasher=hasher, policy=policy)


def role_service(session: AsyncSession = Depends(db_session)) -> RoleService:
    return RoleService(session=session)


def auth_service(
    session: AsyncSession = Depends(db_session),
    hasher: PasswordHasher = Depends(password_hasher_dep),
    cfg: JwtConfig = Depends(jwt_config_dep),
) -> AuthService:
    return AuthService(session=session, hasher=hasher, jwt_config=cfg)
