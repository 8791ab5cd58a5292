"""
hipp_admin.api.routers.dev

Non-production diagnostics for the identity store.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_404_NOT_FOUND

from hipp_admin.api.deps import db_session, settings_dep
from hipp_admin.db.repositories.roles import RoleRepo
from hipp_admin.db.repositories.users import UserRepo
from hipp_admin.settings import Settings

router = APIRouter(prefix="/api/dev", tags=["dev"])


class IdentityReport(BaseModel):
    total_users: int
    total_roles: int
    admin_user_exists: bool
    admin_user_roles: list[str]


@router.get("/verify-identity", response_model=IdentityReport)
async def verify_identity(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> IdentityReport:
    if settings.env == "prod":
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")

    users = UserRepo(session)
    roles = RoleRepo(session)
    admin = await users.get_by_username(settings.seed_admin_username)
    return IdentityReport(
        total_users=await users.count(),
        total_roles=await roles.count(),
        admin_user_exists=admin is not None,
        admin_user_roles=await roles.role_names_for_user(admin.id) if admin is not None else [],
    )
