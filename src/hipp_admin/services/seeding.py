"""
hipp_admin.services.seeding

Bootstrap data.

Responsibilities:
- Ensure the known roles exist (idempotent).
- Ensure the configured admin account exists and holds the Admin role.
"""

from __future__ import annotations

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from hipp_admin.auth.passwords import PasswordHasher
from hipp_admin.auth.roles import ALL_ROLES, UserRole
from hipp_admin.db.repositories.roles import RoleRepo
from hipp_admin.db.repositories.users import UserRepo
from hipp_admin.observability.logging import get_logger

log = get_logger(__name__)


async def seed_roles(session: AsyncSession) -> list[str]:
    """Create any missing role from `ALL_ROLES`; returns the names created."""
    roles = RoleRepo(session)
    created: list[str] = []
    try:
        for name in ALL_ROLES:
            if await roles.get_by_name(name) is not None:
                log.debug("seed_role_exists", role=name)
                continue
            await roles.create(name=name)
            created.append(name)
        await session.commit()
    except Exception:
        await session.rollback()
        log.exception("seed_roles_failed")
        raise
    log.info("seed_roles_completed", created=created)
    return created


async def seed_admin_user(
    session: AsyncSession,
    *,
    hasher: PasswordHasher,
    username: str,
    email: str,
    password: str,
) -> str:
    """Create the admin account if missing and make sure it holds Admin. Returns its id."""
    users = UserRepo(session)
    roles = RoleRepo(session)
    try:
        admin_role = await roles.get_by_name(UserRole.admin.value)
        if admin_role is None:
            raise RuntimeError("Admin role does not exist; seed roles first")

        user = await users.get_by_username(username)
        if user is None:
            password_hash = await asyncio.to_thread(hasher.hash, password)
            user = await users.create(
                username=username,
                email=email,
                password_hash=password_hash,
                first_name="Hipp",
                last_name="Admin",
                email_confirmed=True,
                roles=[admin_role],
            )
            log.info("seed_admin_created", user_id=user.id)
        elif not await roles.is_member(user_id=user.id, role_id=admin_role.id):
            await roles.add_member(user_id=user.id, role_id=admin_role.id)
            log.info("seed_admin_role_assigned", user_id=user.id)
        else:
            log.debug("seed_admin_exists", user_id=user.id)
        await session.commit()
    except Exception:
        await session.rollback()
        log.exception("seed_admin_failed")
        raise
    return user.id
