"""
hipp_admin.services.user_service

User administration service (transaction owner).

Responsibilities:
- CRUD over user accounts with uniqueness and role-name validation.
- Password policy enforcement on create, admin reset and self-service change.
- Translate storage uniqueness violations into duplicate email/username errors.
"""

from __future__ import annotations

import asyncio

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hipp_admin.auth.passwords import PasswordHasher, PasswordPolicy
from hipp_admin.db.models import User, normalize
from hipp_admin.db.repositories.roles import RoleRepo
from hipp_admin.db.repositories.users import UserRepo
from hipp_admin.errors import DuplicateError, NotFoundError, ValidationFailed
from hipp_admin.observability.logging import get_logger

log = get_logger(__name__)


class UserService:
    def __init__(
        self,
        *,
        session: AsyncSession,
        hasher: PasswordHasher,
        policy: PasswordPolicy,
    ) -> None:
        self._session = session
        self._hasher = hasher
        self._policy = policy

        self._users = UserRepo(session)
        self._roles = RoleRepo(session)

    # -- reads ---------------------------------------------------------------

    async def list_users(self) -> list[User]:
        return await self._users.list_all()

    async def get_user(self, user_id: str) -> User:
        user = await self._users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def get_by_email(self, email: str) -> User:
        user = await self._users.get_by_email(email)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def get_by_username(self, username: str) -> User:
        user = await self._users.get_by_username(username)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def list_by_role(self, role_name: str) -> list[User]:
        if await self._roles.get_by_name(role_name) is None:
            raise NotFoundError("Role not found")
        return await self._users.list_by_role(role_name)

    async def is_email_unique(self, email: str) -> bool:
        return await self._users.is_email_unique(email)

    async def is_username_unique(self, username: str) -> bool:
        return await self._users.is_username_unique(username)

    # -- writes --------------------------------------------------------------

    async def create_user(
        self,
        *,
        username: str,
        email: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
        roles: list[str] | None = None,
    ) -> User:
        log.info("user_create_requested", username=username)
        role_names = list(dict.fromkeys(roles or []))

        # Any role present in the roles table is assignable, seeded or admin-created.
        role_rows = await self._roles.get_many_by_name(role_names)
        known = {r.normalized_name for r in role_rows}
        invalid = [r for r in role_names if normalize(r) not in known]
        if invalid:
            log.warning("user_create_invalid_roles", invalid_roles=invalid)
            valid = [r.name for r in await self._roles.list_all()]
            raise ValidationFailed(
                f"Invalid role(s) specified: {', '.join(invalid)}. "
                f"Valid roles are: {', '.join(valid)}"
            )

        # Pre-checks give a precise message; the unique constraints decide races.
        if not await self._users.is_email_unique(email):
            log.warning("user_create_duplicate_email", email=email)
            raise DuplicateError("Email is already in use")
        if not await self._users.is_username_unique(username):
            log.warning("user_create_duplicate_username", username=username)
            raise DuplicateError("Username is already in use")

        self._check_policy(password)

        password_hash = await asyncio.to_thread(self._hasher.hash, password)
        try:
            user = await self._users.create(
                username=username,
                email=email,
                password_hash=password_hash,
                first_name=first_name or "",
                last_name=last_name or "",
                email_confirmed=True,
                roles=role_rows,
            )
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise await self._duplicate_error(email=email, username=username) from e
        except Exception:
            await self._session.rollback()
            raise

        log.info("user_created", user_id=user.id, roles=role_names)
        return user

    async def update_user(
        self,
        user_id: str,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
        email: str | None = None,
    ) -> User:
        log.info("user_update_requested", user_id=user_id)
        user = await self.get_user(user_id)

        if email is not None and not await self._users.is_email_unique(
            email, exclude_id=user_id
        ):
            raise DuplicateError("Email is already in use")

        try:
            await self._users.update(
                user,
                first_name=first_name,
                last_name=last_name,
                email=email,
            )
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise DuplicateError("Email is already in use") from e
        except Exception:
            await self._session.rollback()
            raise

        log.info("user_updated", user_id=user_id)
        return user

    async def delete_user(self, user_id: str) -> None:
        log.info("user_delete_requested", user_id=user_id)
        user = await self.get_user(user_id)
        try:
            await self._users.delete(user)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        log.info("user_deleted", user_id=user_id)

    async def change_password(
        self, user_id: str, *, current_password: str, new_password: str
    ) -> bool:
        """
        Self-service change. Returns False when the current password does not
        verify; policy violations on the new password raise ValidationFailed.
        """
        user = await self.get_user(user_id)
        ok = await asyncio.to_thread(self._hasher.verify, user.password_hash, current_password)
        if not ok:
            log.warning("password_change_rejected", user_id=user_id)
            return False
        await self._set_password(user, new_password)
        log.info("password_changed", user_id=user_id)
        return True

    async def admin_reset_password(self, user_id: str, *, new_password: str) -> None:
        log.info("password_reset_requested", user_id=user_id)
        user = await self.get_user(user_id)
        await self._set_password(user, new_password)
        log.info("password_reset", user_id=user_id)

    # -- helpers -------------------------------------------------------------

    def _check_policy(self, password: str) -> None:
        errors = self._policy.violations(password)
        if errors:
            raise ValidationFailed(" ".join(errors))

    async def _set_password(self, user: User, new_password: str) -> None:
        self._check_policy(new_password)
        password_hash = await asyncio.to_thread(self._hasher.hash, new_password)
        try:
            await self._users.update(user, password_hash=password_hash)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

    async def _duplicate_error(self, *, email: str, username: str) -> DuplicateError:
        # Runs after rollback: whichever value is now taken is the one that collided.
        if not await self._users.is_email_unique(email):
            log.warning("user_create_duplicate_email", email=email)
            return DuplicateError("Email is already in use")
        if not await self._users.is_username_unique(username):
            log.warning("user_create_duplicate_username", username=username)
            return DuplicateError("Username is already in use")
        return DuplicateError("User already exists")


# --- Module Notes -----------------------------------------------------------
# bcrypt hashing and verification run via `asyncio.to_thread` so they never
# block the event loop.
