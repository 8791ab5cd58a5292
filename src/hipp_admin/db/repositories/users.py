"""
hipp_admin.db.repositories.users

Repository for `User` entities (the credential store).

Responsibilities:
- Keyed lookups by id, email and username (case-insensitive).
- Create/update/delete user rows.
- Uniqueness pre-checks for email and username.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hipp_admin.db.models import Role, User, normalize, user_roles


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        first_name: str = "",
        last_name: str = "",
        email_confirmed: bool = True,
        roles: list[Role] | None = None,
    ) -> User:
        user = User(
            username=username,
            normalized_username=normalize(username),
            email=email,
            normalized_email=normalize(email),
            email_confirmed=email_confirmed,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            roles=list(roles or []),
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def get(self, user_id: str) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.normalized_email == normalize(email))
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.normalized_username == normalize(username))
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_all(self) -> list[User]:
        stmt = select(User).order_by(User.normalized_username)
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_by_role(self, role_name: str) -> list[User]:
        stmt = (
            select(User)
            .join(user_roles, user_roles.c.user_id == User.id)
            .join(Role, Role.id == user_roles.c.role_id)
            .where(Role.normalized_name == normalize(role_name))
            .order_by(User.normalized_username)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def count(self) -> int:
        return int((await self._session.execute(select(func.count(User.id)))).scalar_one())

    async def exists(self, user_id: str) -> bool:
        stmt = select(exists().where(User.id == user_id))
        return bool((await self._session.execute(stmt)).scalar())

    async def update(self, user: User, **fields: Any) -> User:
        # None leaves a field unchanged; normalized copies follow their source fields.
        for name, value in fields.items():
            if value is None:
                continue
            setattr(user, name, value)
            if name == "email":
                user.normalized_email = normalize(value)
            elif name == "username":
                user.normalized_username = normalize(value)
        await self._session.flush()
        return user

    async def delete(self, user: User) -> None:
        await self._session.delete(user)
        await self._session.flush()

    async def is_email_unique(self, email: str, *, exclude_id: str | None = None) -> bool:
        stmt = select(User.id).where(User.normalized_email == normalize(email))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return (await self._session.execute(stmt.limit(1))).first() is None

    async def is_username_unique(self, username: str, *, exclude_id: str | None = None) -> bool:
        stmt = select(User.id).where(User.normalized_username == normalize(username))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return (await self._session.execute(stmt.limit(1))).first() is None


# --- Module Notes -----------------------------------------------------------
# `User.roles` is loaded eagerly (selectin) so responses can list role names
# without lazy IO under asyncio.
