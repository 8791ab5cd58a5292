"""
tests.conftest

Shared fixtures: test Settings, an app with its lifespan entered, an HTTP
client bound to it in-process, and helpers for login.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hipp_admin.api.app import create_app
from hipp_admin.services.user_service import UserService
from hipp_admin.settings import Settings

TEST_SECRET = "test-signing-secret-0123456789-abcdefghijklmnop"
ADMIN_USERNAME = "HippAdmin"
ADMIN_PASSWORD = "adminpass1!"


def make_settings(tmp_path: Path, **overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "env": "test",
        "log_level": "WARNING",
        "jwt_issuer": "hipp-test",
        "jwt_audience": "hipp-test-api",
        "jwt_secret": TEST_SECRET,
        "jwt_expire_minutes": 30,
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'hipp.db'}",
        "bcrypt_rounds": 4,
        "seed_admin_password": ADMIN_PASSWORD,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not run the lifespan; enter it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def session_factory(app: FastAPI) -> async_sessionmaker[AsyncSession]:
    return app.state.sessionmaker


@pytest.fixture
def make_user_service(app: FastAPI):
    def _make(session: AsyncSession) -> UserService:
        return UserService(
            session=session,
            hasher=app.state.password_hasher,
            policy=app.state.password_policy,
        )

    return _make


async def login(client: httpx.AsyncClient, username: str, password: str) -> httpx.Response:
    return await client.post("/api/auth/login", json={"username": username, "password": password})


async def token_for(client: httpx.AsyncClient, username: str, password: str) -> str:
    r = await login(client, username, password)
    assert r.status_code == 200, r.text
    return r.json()["token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin_headers(client: httpx.AsyncClient) -> dict[str, str]:
    return bearer(await token_for(client, ADMIN_USERNAME, ADMIN_PASSWORD))
