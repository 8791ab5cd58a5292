"""
hipp_admin.db.repositories.roles

Repository for `Role` entities and the user_roles membership index.

Responsibilities:
- Role catalogue lookups and creation.
- Membership reads (role names for a user) and add/remove of (user, role) pairs.
"""

from __future__ import annotations

from sqlalchemy import delete, exists, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from hipp_admin.db.models import Role, normalize, user_roles


class RoleRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, name: str, description: str = "") -> Role:
        role = Role(name=name, normalized_name=normalize(name), description=description)
        self._session.add(role)
        await self._session.flush()
        return role

    async def get(self, role_id: str) -> Role | None:
        return await self._session.get(Role, role_id)

    async def get_by_name(self, name: str) -> Role | None:
        stmt = select(Role).where(Role.normalized_name == normalize(name))
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_many_by_name(self, names: list[str]) -> list[Role]:
        if not names:
            return []
        stmt = select(Role).where(Role.normalized_name.in_([normalize(n) for n in names]))
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_all(self) -> list[Role]:
        stmt = select(Role).order_by(Role.name)
        return list((await self._session.execute(stmt)).scalars().all())

    async def count(self) -> int:
        return int((await self._session.execute(select(func.count(Role.id)))).scalar_one())

    async def role_names_for_user(self, user_id: str) -> list[str]:
        stmt = (
            select(Role.name)
            .join(user_roles, user_roles.c.role_id == Role.id)
            .where(user_roles.c.user_id == user_id)
            .order_by(Role.name)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def is_member(self, *, user_id: str, role_id: str) -> bool:
        stmt = select(
            exists().where(user_roles.c.user_id == user_id, user_roles.c.role_id == role_id)
        )
        return bool((await self._session.execute(stmt)).scalar())

    async def add_member(self, *, user_id: str, role_id: str) -> None:
        await self._session.execute(insert(user_roles).values(user_id=user_id, role_id=role_id))

    async def remove_member(self, *, user_id: str, role_id: str) -> int:
        result = await self._session.execute(
            delete(user_roles).where(
                user_roles.c.user_id == user_id, user_roles.c.role_id == role_id
            )
        )
        return result.rowcount or 0


# --- Module Notes -----------------------------------------------------------
# Membership writes go straight to the join table; callers that hold a loaded
# `User` must refresh `User.roles` afterwards.
