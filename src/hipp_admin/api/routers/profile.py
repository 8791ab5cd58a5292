"""
hipp_admin.api.routers.profile

Self-service endpoints for any authenticated caller.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.status import HTTP_400_BAD_REQUEST

from hipp_admin.api.deps import user_service
from hipp_admin.api.schemas import MessageResponse, UserResponse
from hipp_admin.auth.deps import require_roles
from hipp_admin.auth.models import Principal
from hipp_admin.auth.policy import required_roles
from hipp_admin.services.user_service import UserService

router = APIRouter(prefix="/api/profile", tags=["profile"])

_authenticated = require_roles(required_roles("profile"))


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=1, max_length=128)


@router.get("", response_model=UserResponse)
async def get_profile(
    principal: Principal = Depends(_authenticated),
    svc: UserService = Depends(user_service),
) -> UserResponse:
    # Token subject is the user id; a deleted account yields 404.
    return UserResponse.from_user(await svc.get_user(principal.subject))


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    principal: Principal = Depends(_authenticated),
    svc: UserService = Depends(user_service),
) -> MessageResponse:
    changed = await svc.change_password(
        principal.subject,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    if not changed:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Failed to change password")
    return MessageResponse(message="Password changed successfully")
