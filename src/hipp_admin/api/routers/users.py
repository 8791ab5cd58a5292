"""
hipp_admin.api.routers.users

Admin user management endpoints.

Responsibilities:
- List and look up users (by id, email, username, role).
- Create, update, delete users and reset their passwords.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, EmailStr, Field
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from hipp_admin.api.deps import user_service
from hipp_admin.api.schemas import MessageResponse, UserResponse
from hipp_admin.auth.deps import require_roles
from hipp_admin.auth.policy import required_roles
from hipp_admin.services.user_service import UserService

router = APIRouter(
    prefix="/api/user",
    tags=["users"],
    dependencies=[Depends(require_roles(required_roles("users")))],
)


class CreateUserRequest(BaseModel):
    username: str = Field(min_length=1, max_length=256)
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
    first_name: str | None = Field(default=None, max_length=256)
    last_name: str | None = Field(default=None, max_length=256)
    roles: list[str] = Field(default_factory=list)


class UpdateUserRequest(BaseModel):
    first_name: str | None = Field(default=None, max_length=256)
    last_name: str | None = Field(default=None, max_length=256)
    email: EmailStr | None = None


class AdminResetPasswordRequest(BaseModel):
    new_password: str = Field(min_length=1, max_length=128)


@router.get("", response_model=list[UserResponse])
async def list_users(svc: UserService = Depends(user_service)) -> list[UserResponse]:
    return [UserResponse.from_user(u) for u in await svc.list_users()]


@router.get("/by-email/{email}", response_model=UserResponse)
async def get_user_by_email(
    email: str, svc: UserService = Depends(user_service)
) -> UserResponse:
    return UserResponse.from_user(await svc.get_by_email(email))


@router.get("/by-username/{username}", response_model=UserResponse)
async def get_user_by_username(
    username: str, svc: UserService = Depends(user_service)
) -> UserResponse:
    return UserResponse.from_user(await svc.get_by_username(username))


@router.get("/by-role/{role_name}", response_model=list[UserResponse])
async def list_users_by_role(
    role_name: str, svc: UserService = Depends(user_service)
) -> list[UserResponse]:
    return [UserResponse.from_user(u) for u in await svc.list_by_role(role_name)]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, svc: UserService = Depends(user_service)) -> UserResponse:
    return UserResponse.from_user(await svc.get_user(user_id))


@router.post("", response_model=UserResponse, status_code=HTTP_201_CREATED)
async def create_user(
    body: CreateUserRequest,
    response: Response,
    svc: UserService = Depends(user_service),
) -> UserResponse:
    user = await svc.create_user(
        username=body.username,
        email=str(body.email),
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
        roles=body.roles,
    )
    response.headers["Location"] = f"{router.prefix}/{user.id}"
    return UserResponse.from_user(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    body: UpdateUserRequest,
    svc: UserService = Depends(user_service),
) -> UserResponse:
    user = await svc.update_user(
        user_id,
        first_name=body.first_name,
        last_name=body.last_name,
        email=str(body.email) if body.email is not None else None,
    )
    return UserResponse.from_user(user)


@router.post("/{user_id}/reset-password", response_model=MessageResponse)
async def admin_reset_password(
    user_id: str,
    body: AdminResetPasswordRequest,
    svc: UserService = Depends(user_service),
) -> MessageResponse:
    await svc.admin_reset_password(user_id, new_password=body.new_password)
    return MessageResponse(message="Password updated successfully")


@router.delete("/{user_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, svc: UserService = Depends(user_service)) -> Response:
    await svc.delete_user(user_id)
    return Response(status_code=HTTP_204_NO_CONTENT)
