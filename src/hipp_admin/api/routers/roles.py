"""
hipp_admin.api.routers.roles

Admin role catalogue and membership endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from starlette.status import HTTP_201_CREATED

from hipp_admin.api.deps import role_service
from hipp_admin.api.schemas import MessageResponse, RoleResponse
from hipp_admin.auth.deps import require_roles
from hipp_admin.auth.policy import required_roles
from hipp_admin.services.role_service import RoleService

router = APIRouter(
    prefix="/api/role",
    tags=["roles"],
    dependencies=[Depends(require_roles(required_roles("roles")))],
)


class CreateRoleRequest(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    description: str = Field(default="", max_length=1024)


class RoleMembershipRequest(BaseModel):
    user_id: str = Field(min_length=1, max_length=36)
    role_id: str = Field(min_length=1, max_length=36)


@router.get("", response_model=list[RoleResponse])
async def list_roles(svc: RoleService = Depends(role_service)) -> list[RoleResponse]:
    return [RoleResponse.from_role(r) for r in await svc.list_roles()]


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(role_id: str, svc: RoleService = Depends(role_service)) -> RoleResponse:
    return RoleResponse.from_role(await svc.get_role(role_id))


@router.post("", response_model=RoleResponse, status_code=HTTP_201_CREATED)
async def create_role(
    body: CreateRoleRequest, svc: RoleService = Depends(role_service)
) -> RoleResponse:
    role = await svc.create_role(name=body.name, description=body.description)
    return RoleResponse.from_role(role)


@router.post("/assign", response_model=MessageResponse)
async def assign_role(
    body: RoleMembershipRequest, svc: RoleService = Depends(role_service)
) -> MessageResponse:
    await svc.assign(user_id=body.user_id, role_id=body.role_id)
    return MessageResponse(message="Role assigned successfully")


@router.post("/remove", response_model=MessageResponse)
async def remove_role(
    body: RoleMembershipRequest, svc: RoleService = Depends(role_service)
) -> MessageResponse:
    await svc.remove(user_id=body.user_id, role_id=body.role_id)
    return MessageResponse(message="Role removed successfully")


# --- Module Notes -----------------------------------------------------------
# Membership changes do not touch tokens already issued; affected users see the
# new role set at their next login.
