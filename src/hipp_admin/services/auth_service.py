"""
hipp_admin.services.auth_service

Login: password verification and token issuance.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession

from hipp_admin.auth.jwt import JwtConfig, issue_token
from hipp_admin.auth.passwords import PasswordHasher
from hipp_admin.db.repositories.roles import RoleRepo
from hipp_admin.db.repositories.users import UserRepo
from hipp_admin.errors import AuthenticationError
from hipp_admin.observability.logging import get_logger

log = get_logger(__name__)


@lru_cache(maxsize=4)
def _dummy_hash(hasher: PasswordHasher) -> str:
    return hasher.hash("unknown-user-placeholder")


def _check_credentials(hasher: PasswordHasher, stored_hash: str | None, password: str) -> bool:
    # Unknown usernames still pay for one bcrypt check so timing does not reveal them.
    if stored_hash is None:
        hasher.verify(_dummy_hash(hasher), password)
        return False
    return hasher.verify(stored_hash, password)


@dataclass(frozen=True, slots=True)
class LoginResult:
    user_id: str
    username: str
    email: str
    roles: list[str]
    token: str

    @property
    def primary_role(self) -> str | None:
        return self.roles[0] if self.roles else None


class AuthService:
    def __init__(
        self,
        *,
        session: AsyncSession,
        hasher: PasswordHasher,
        jwt_config: JwtConfig,
    ) -> None:
        self._hasher = hasher
        self._jwt = jwt_config
        self._users = UserRepo(session)
        self._roles = RoleRepo(session)

    async def login(
        self, *, username: str, password: str, now: datetime | None = None
    ) -> LoginResult:
        user = await self._users.get_by_username(username)
        stored_hash = user.password_hash if user is not None else None
        ok = await asyncio.to_thread(_check_credentials, self._hasher, stored_hash, password)
        if user is None or not ok:
            # Same outcome for unknown user and wrong password: no enumeration.
            log.info("login_failed", username=username)
            raise AuthenticationError()

        # Read membership fresh; the token carries the role set as of now.
        roles = await self._roles.role_names_for_user(user.id)
        token = issue_token(
            cfg=self._jwt,
            subject=user.id,
            username=user.username,
            roles=roles,
            now=now,
        )
        log.info("login_succeeded", user_id=user.id, roles=roles)
        return LoginResult(
            user_id=user.id,
            username=user.username,
            email=user.email,
            roles=roles,
            token=token,
        )
