"""
hipp_admin.api.routers.auth

Login endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.status import HTTP_401_UNAUTHORIZED

from hipp_admin.api.deps import auth_service
from hipp_admin.errors import AuthenticationError
from hipp_admin.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=256)
    password: str = Field(min_length=1, max_length=128)


class LoginResponse(BaseModel):
    success: bool
    token: str | None = None
    username: str | None = None
    email: str | None = None
    role: str | None = None
    roles: list[str] = Field(default_factory=list)
    message: str | None = None


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={HTTP_401_UNAUTHORIZED: {"model": LoginResponse}},
)
async def login(
    body: LoginRequest,
    svc: AuthService = Depends(auth_service),
) -> LoginResponse | JSONResponse:
    """
    Authenticate with username and password; returns a JWT bearer token.
    Send it as `Authorization: Bearer <token>` on later requests.
    """
    try:
        result = await svc.login(username=body.username, password=body.password)
    except AuthenticationError as e:
        return JSONResponse(
            status_code=HTTP_401_UNAUTHORIZED,
            content=LoginResponse(success=False, message=e.message).model_dump(),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return LoginResponse(
        success=True,
        token=result.token,
        username=result.username,
        email=result.email,
        role=result.primary_role,
        roles=result.roles,
    )
