"""
hipp_admin.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer token into a typed `Principal` (401 on any failure).
- Enforce role gates via reusable dependency factories (403 on mismatch).
"""

from __future__ import annotations

from collections.abc import Iterable

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from hipp_admin.auth.jwt import JwtConfig, JwtValidationError, TokenRejection, decode_and_validate
from hipp_admin.auth.models import Principal
from hipp_admin.observability.logging import get_logger

log = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def jwt_config_dep(request: Request) -> JwtConfig:
    # Built once in `api.app.create_app`.
    return request.app.state.jwt_config  # type: ignore[no-any-return]


def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    cfg: JwtConfig = Depends(jwt_config_dep),
) -> Principal:
    # Authn: require a bearer token.
    if creds is None or not creds.credentials:
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers=_BEARER_CHALLENGE,
        )

    try:
        claims = decode_and_validate(cfg=cfg, token=creds.credentials)
    except JwtValidationError as e:
        log.info("token_rejected", reason=e.reason.value)
        if e.reason is TokenRejection.expired:
            detail = "Token expired"
        else:
            detail = f"Invalid token: {e.reason.value}"
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers=_BEARER_CHALLENGE,
        ) from e

    return Principal(subject=claims.subject, username=claims.username, roles=claims.roles)


def require_roles(*required: str | Iterable[str]):
    required_set = frozenset(
        r for item in required for r in ((item,) if isinstance(item, str) else item)
    )

    def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        # Authz: caller needs at least one of the required roles.
        if not principal.has_any_role(required_set):
            log.info(
                "access_denied",
                subject=principal.subject,
                required=sorted(required_set),
            )
            raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Insufficient role")
        return principal

    return _dep


# --- Module Notes -----------------------------------------------------------
# Routers attach `require_roles(required_roles("<route>"))` at registration time;
# see `auth.policy.ROUTE_ROLES` for the table.
