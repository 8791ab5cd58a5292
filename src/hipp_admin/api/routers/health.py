"""
hipp_admin.api.routers.health

Liveness and readiness probes.

Responsibilities:
- `/healthz`: the process is up; touches nothing else.
- `/readyz`: the credential store answers and the role catalogue is provisioned.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from hipp_admin.api.deps import db_session
from hipp_admin.auth.roles import ALL_ROLES
from hipp_admin.db.repositories.roles import RoleRepo

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz", response_model=None)
async def readyz(session: AsyncSession = Depends(db_session)) -> dict[str, object] | JSONResponse:
    roles = await RoleRepo(session).get_many_by_name(list(ALL_ROLES))
    missing = sorted(set(ALL_ROLES) - {r.name for r in roles})
    if missing:
        # Every gated route depends on these rows; an unseeded store cannot serve.
        return JSONResponse(
            status_code=HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "missing_roles": missing},
        )
    return {"status": "ready", "roles": len(roles)}
