"""
hipp_admin.services.role_service

Role catalogue and membership service (transaction owner).

Responsibilities:
- List/get/create roles.
- Assign and remove roles with explicit already-held / not-held rejections.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hipp_admin.db.models import Role
from hipp_admin.db.repositories.roles import RoleRepo
from hipp_admin.db.repositories.users import UserRepo
from hipp_admin.errors import DuplicateError, MembershipError, NotFoundError, ValidationFailed
from hipp_admin.observability.logging import get_logger

log = get_logger(__name__)


class RoleService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._roles = RoleRepo(session)
        self._users = UserRepo(session)

    async def list_roles(self) -> list[Role]:
        return await self._roles.list_all()

    async def get_role(self, role_id: str) -> Role:
        role = await self._roles.get(role_id)
        if role is None:
            raise NotFoundError("Role not found")
        return role

    async def create_role(self, *, name: str, description: str = "") -> Role:
        name = name.strip()
        if not name:
            raise ValidationFailed("Role name must be non-empty")
        if await self._roles.get_by_name(name) is not None:
            raise DuplicateError(f"Role '{name}' already exists")
        try:
            role = await self._roles.create(name=name, description=description)
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise DuplicateError(f"Role '{name}' already exists") from e
        except Exception:
            await self._session.rollback()
            raise
        log.info("role_created", role_id=role.id, role=name)
        return role

    async def assign(self, *, user_id: str, role_id: str) -> None:
        role = await self._require_pair(user_id=user_id, role_id=role_id)
        if await self._roles.is_member(user_id=user_id, role_id=role_id):
            raise MembershipError("User is already in this role")
        try:
            await self._roles.add_member(user_id=user_id, role_id=role_id)
            await self._session.commit()
        except IntegrityError as e:
            # Composite primary key: a concurrent assign of the same pair won.
            await self._session.rollback()
            raise MembershipError("User is already in this role") from e
        except Exception:
            await self._session.rollback()
            raise
        log.info("role_assigned", user_id=user_id, role=role.name)

    async def remove(self, *, user_id: str, role_id: str) -> None:
        role = await self._require_pair(user_id=user_id, role_id=role_id)
        if not await self._roles.is_member(user_id=user_id, role_id=role_id):
            raise MembershipError("User is not in this role")
        try:
            removed = await self._roles.remove_member(user_id=user_id, role_id=role_id)
            if removed == 0:
                raise MembershipError("User is not in this role")
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        log.info("role_removed", user_id=user_id, role=role.name)

    async def _require_pair(self, *, user_id: str, role_id: str) -> Role:
        if not await self._users.exists(user_id):
            raise NotFoundError("User not found")
        return await self.get_role(role_id)
