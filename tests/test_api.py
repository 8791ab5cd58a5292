"""
tests.test_api

End-to-end HTTP behavior: login, the 401/403 role gate, user and role
administration, and self-service profile endpoints.
"""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import UTC, datetime, timedelta

import httpx
import pytest
from fastapi import FastAPI

from conftest import ADMIN_PASSWORD, ADMIN_USERNAME, bearer, login, token_for
from hipp_admin.api.app import _service_error_handler
from hipp_admin.auth.jwt import JwtConfig, decode_and_validate, issue_token
from hipp_admin.errors import (
    AdminServiceError,
    AuthenticationError,
    MembershipError,
    NotFoundError,
)


async def _create_user(
    client: httpx.AsyncClient,
    headers: dict[str, str],
    username: str = "dave",
    roles: list[str] | None = None,
) -> dict:
    r = await client.post(
        "/api/user",
        headers=headers,
        json={
            "username": username,
            "email": f"{username}@hipp.com",
            "password": "davepass",
            "first_name": "Dave",
            "last_name": "Driver",
            "roles": roles if roles is not None else ["Shofer"],
        },
    )
    assert r.status_code == 201, r.text
    return r.json()


async def _role_id(client: httpx.AsyncClient, headers: dict[str, str], name: str) -> str:
    r = await client.get("/api/role", headers=headers)
    assert r.status_code == 200
    return next(role["id"] for role in r.json() if role["name"] == name)


# -- login -------------------------------------------------------------------


@pytest.mark.asyncio
async def test_admin_login(app: FastAPI, client: httpx.AsyncClient) -> None:
    r = await login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["username"] == ADMIN_USERNAME
    assert body["email"] == "hippadmin@hipp.com"
    assert body["role"] == "Admin"
    assert body["roles"] == ["Admin"]

    claims = decode_and_validate(cfg=app.state.jwt_config, token=body["token"])
    assert claims.username == ADMIN_USERNAME
    assert claims.roles == frozenset({"Admin"})


@pytest.mark.asyncio
async def test_login_username_is_case_insensitive(client: httpx.AsyncClient) -> None:
    r = await login(client, ADMIN_USERNAME.lower(), ADMIN_PASSWORD)
    assert r.status_code == 200
    assert r.json()["username"] == ADMIN_USERNAME


@pytest.mark.parametrize(
    ("username", "password"),
    [(ADMIN_USERNAME, "wrong-password"), ("nobody", "whatever")],
)
@pytest.mark.asyncio
async def test_bad_credentials_are_indistinguishable(
    client: httpx.AsyncClient, username: str, password: str
) -> None:
    r = await login(client, username, password)
    assert r.status_code == 401
    assert r.headers["www-authenticate"] == "Bearer"
    body = r.json()
    assert body["success"] is False
    assert body["token"] is None
    assert body["message"] == "Invalid username or password"


@pytest.mark.asyncio
async def test_login_rejects_empty_fields(client: httpx.AsyncClient) -> None:
    r = await client.post("/api/auth/login", json={"username": "", "password": "x"})
    assert r.status_code == 422


# -- role gate ---------------------------------------------------------------


@pytest.mark.asyncio
async def test_missing_token_is_401(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/user")
    assert r.status_code == 401
    assert r.json()["detail"] == "Missing bearer token"
    assert r.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_garbage_token_is_401(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/user", headers=bearer("not-a-jwt"))
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid token: malformed"


@pytest.mark.asyncio
async def test_expired_token_is_401(app: FastAPI, client: httpx.AsyncClient) -> None:
    cfg: JwtConfig = app.state.jwt_config
    token = issue_token(
        cfg=cfg,
        subject="someone",
        username=ADMIN_USERNAME,
        roles=["Admin"],
        now=datetime.now(UTC) - cfg.ttl - timedelta(minutes=1),
    )
    r = await client.get("/api/user", headers=bearer(token))
    assert r.status_code == 401
    assert r.json()["detail"] == "Token expired"


@pytest.mark.asyncio
async def test_foreign_issuer_is_401(app: FastAPI, client: httpx.AsyncClient) -> None:
    foreign = replace(app.state.jwt_config, issuer="someone-else")
    token = issue_token(cfg=foreign, subject="x", username="x", roles=["Admin"])
    r = await client.get("/api/role", headers=bearer(token))
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid token: issuer"


@pytest.mark.asyncio
async def test_non_admin_is_403(client: httpx.AsyncClient, admin_headers) -> None:
    await _create_user(client, admin_headers, roles=["Shofer"])
    headers = bearer(await token_for(client, "dave", "davepass"))

    for method, path in [
        ("GET", "/api/user"),
        ("GET", "/api/role"),
        ("DELETE", "/api/user/anything"),
    ]:
        r = await client.request(method, path, headers=headers)
        assert r.status_code == 403, (method, path)
        assert r.json()["detail"] == "Insufficient role"


@pytest.mark.asyncio
async def test_user_without_roles_can_use_profile(
    client: httpx.AsyncClient, admin_headers
) -> None:
    await _create_user(client, admin_headers, roles=[])
    headers = bearer(await token_for(client, "dave", "davepass"))

    r = await client.get("/api/profile", headers=headers)
    assert r.status_code == 200
    assert r.json()["roles"] == []
    assert (await client.get("/api/user", headers=headers)).status_code == 403


# -- users -------------------------------------------------------------------


@pytest.mark.asyncio
async def test_user_crud(client: httpx.AsyncClient, admin_headers) -> None:
    created = await _create_user(client, admin_headers, roles=["Shofer", "Etiketues"])
    user_id = created["id"]
    assert created["roles"] == ["Etiketues", "Shofer"]

    r = await client.get(f"/api/user/{user_id}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["username"] == "dave"

    r = await client.get("/api/user/by-email/DAVE@hipp.com", headers=admin_headers)
    assert r.json()["id"] == user_id
    r = await client.get("/api/user/by-username/DAVE", headers=admin_headers)
    assert r.json()["id"] == user_id
    r = await client.get("/api/user/by-role/Shofer", headers=admin_headers)
    assert [u["id"] for u in r.json()] == [user_id]

    r = await client.put(
        f"/api/user/{user_id}", headers=admin_headers, json={"last_name": "Loader"}
    )
    assert r.status_code == 200
    assert r.json()["last_name"] == "Loader"
    assert r.json()["first_name"] == "Dave"

    r = await client.get("/api/user", headers=admin_headers)
    assert {u["username"] for u in r.json()} == {"dave", ADMIN_USERNAME}

    r = await client.delete(f"/api/user/{user_id}", headers=admin_headers)
    assert r.status_code == 204
    r = await client.get(f"/api/user/{user_id}", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["detail"] == "User not found"


@pytest.mark.asyncio
async def test_create_user_sets_location(client: httpx.AsyncClient, admin_headers) -> None:
    r = await client.post(
        "/api/user",
        headers=admin_headers,
        json={"username": "erin", "email": "erin@hipp.com", "password": "erinpass"},
    )
    assert r.status_code == 201
    assert r.headers["location"] == f"/api/user/{r.json()['id']}"


@pytest.mark.asyncio
async def test_create_user_rejections(client: httpx.AsyncClient, admin_headers) -> None:
    await _create_user(client, admin_headers)

    base = {"username": "frank", "email": "frank@hipp.com", "password": "frankpass"}

    r = await client.post("/api/user", headers=admin_headers, json={**base, "email": "dave@hipp.com"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Email is already in use"

    r = await client.post("/api/user", headers=admin_headers, json={**base, "username": "Dave"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Username is already in use"

    r = await client.post("/api/user", headers=admin_headers, json={**base, "roles": ["Pilot"]})
    assert r.status_code == 400
    assert r.json()["detail"].startswith("Invalid role(s) specified: Pilot")

    r = await client.post("/api/user", headers=admin_headers, json={**base, "password": "ABC"})
    assert r.status_code == 400

    r = await client.post("/api/user", headers=admin_headers, json={**base, "email": "not-an-email"})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_unknown_user_is_404(client: httpx.AsyncClient, admin_headers) -> None:
    for method, path in [
        ("GET", "/api/user/missing"),
        ("GET", "/api/user/by-email/missing@hipp.com"),
        ("GET", "/api/user/by-username/missing"),
        ("GET", "/api/user/by-role/Pilot"),
        ("DELETE", "/api/user/missing"),
    ]:
        r = await client.request(method, path, headers=admin_headers)
        assert r.status_code == 404, (method, path)


@pytest.mark.asyncio
async def test_admin_reset_password(client: httpx.AsyncClient, admin_headers) -> None:
    user_id = (await _create_user(client, admin_headers))["id"]

    r = await client.post(
        f"/api/user/{user_id}/reset-password",
        headers=admin_headers,
        json={"new_password": "resetpass"},
    )
    assert r.status_code == 200
    assert r.json()["message"] == "Password updated successfully"

    assert (await login(client, "dave", "davepass")).status_code == 401
    assert (await login(client, "dave", "resetpass")).status_code == 200


# -- roles -------------------------------------------------------------------


@pytest.mark.asyncio
async def test_role_catalogue(client: httpx.AsyncClient, admin_headers) -> None:
    r = await client.get("/api/role", headers=admin_headers)
    assert r.status_code == 200
    assert sorted(role["name"] for role in r.json()) == [
        "Admin",
        "Etiketues",
        "Komercialist",
        "Menaxher",
        "Shofer",
    ]

    role_id = r.json()[0]["id"]
    assert (await client.get(f"/api/role/{role_id}", headers=admin_headers)).status_code == 200
    assert (await client.get("/api/role/missing", headers=admin_headers)).status_code == 404

    r = await client.post("/api/role", headers=admin_headers, json={"name": "Admin"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Role 'Admin' already exists"


@pytest.mark.asyncio
async def test_assign_and_remove_over_http(client: httpx.AsyncClient, admin_headers) -> None:
    user_id = (await _create_user(client, admin_headers, roles=[]))["id"]
    role_id = await _role_id(client, admin_headers, "Menaxher")
    body = {"user_id": user_id, "role_id": role_id}

    r = await client.post("/api/role/assign", headers=admin_headers, json=body)
    assert r.status_code == 200
    assert r.json()["message"] == "Role assigned successfully"

    r = await client.post("/api/role/assign", headers=admin_headers, json=body)
    assert r.status_code == 400
    assert r.json()["detail"] == "User is already in this role"

    r = await client.get(f"/api/user/{user_id}", headers=admin_headers)
    assert r.json()["roles"] == ["Menaxher"]

    r = await client.post("/api/role/remove", headers=admin_headers, json=body)
    assert r.status_code == 200
    assert r.json()["message"] == "Role removed successfully"

    r = await client.post("/api/role/remove", headers=admin_headers, json=body)
    assert r.status_code == 400
    assert r.json()["detail"] == "User is not in this role"

    r = await client.post(
        "/api/role/assign", headers=admin_headers, json={**body, "user_id": "missing"}
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_roles_in_token_are_fixed_until_relogin(
    client: httpx.AsyncClient, admin_headers
) -> None:
    user_id = (await _create_user(client, admin_headers, username="gina", roles=["Admin"]))["id"]
    gina = bearer(await token_for(client, "gina", "davepass"))
    assert (await client.get("/api/user", headers=gina)).status_code == 200

    admin_role = await _role_id(client, admin_headers, "Admin")
    r = await client.post(
        "/api/role/remove",
        headers=admin_headers,
        json={"user_id": user_id, "role_id": admin_role},
    )
    assert r.status_code == 200

    # The old token still carries Admin.
    assert (await client.get("/api/user", headers=gina)).status_code == 200

    fresh = bearer(await token_for(client, "gina", "davepass"))
    assert (await client.get("/api/user", headers=fresh)).status_code == 403


# -- profile -----------------------------------------------------------------


@pytest.mark.asyncio
async def test_profile_and_change_password(client: httpx.AsyncClient, admin_headers) -> None:
    await _create_user(client, admin_headers)
    headers = bearer(await token_for(client, "dave", "davepass"))

    r = await client.get("/api/profile", headers=headers)
    assert r.status_code == 200
    assert r.json()["username"] == "dave"
    assert r.json()["roles"] == ["Shofer"]

    r = await client.post(
        "/api/profile/change-password",
        headers=headers,
        json={"current_password": "wrong-pass", "new_password": "newdavepass"},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Failed to change password"

    r = await client.post(
        "/api/profile/change-password",
        headers=headers,
        json={"current_password": "davepass", "new_password": "newdavepass"},
    )
    assert r.status_code == 200
    assert r.json()["message"] == "Password changed successfully"

    assert (await login(client, "dave", "davepass")).status_code == 401
    assert (await login(client, "dave", "newdavepass")).status_code == 200


@pytest.mark.asyncio
async def test_profile_of_deleted_user_is_404(client: httpx.AsyncClient, admin_headers) -> None:
    user_id = (await _create_user(client, admin_headers))["id"]
    headers = bearer(await token_for(client, "dave", "davepass"))

    assert (await client.delete(f"/api/user/{user_id}", headers=admin_headers)).status_code == 204

    r = await client.get("/api/profile", headers=headers)
    assert r.status_code == 404
    assert (await login(client, "dave", "davepass")).status_code == 401


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (NotFoundError("User not found"), 404),
        (MembershipError("User is not in this role"), 400),
        (AuthenticationError(), 401),
    ],
)
@pytest.mark.asyncio
async def test_service_errors_map_to_status(error: AdminServiceError, status: int) -> None:
    response = await _service_error_handler(None, error)  # type: ignore[arg-type]
    assert response.status_code == status
    assert json.loads(response.body) == {"detail": error.message}
