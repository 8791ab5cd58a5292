"""
hipp_admin.auth.jwt

JWT issuing and validation helpers.

Responsibilities:
- Issue signed bearer tokens carrying identity and the role set at login time.
- Decode and validate tokens with strict claim requirements (iss/aud/exp/iat/sub).
- Report why a token was rejected (signature, issuer, audience, expiry, structure).

Note:
- Only HMAC algorithms are supported; the secret must be at least as long as
  the digest.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import (
    InvalidAlgorithmError,
    InvalidAudienceError,
    InvalidIssuerError,
    InvalidSignatureError,
    InvalidTokenError,
)

# Minimum HMAC key length (bytes) per algorithm: the digest size.
MIN_SECRET_BYTES: dict[str, int] = {
    "HS256": 32,
    "HS384": 48,
    "HS512": 64,
}

REQUIRED_CLAIMS = ["exp", "iat", "iss", "aud", "sub"]


class TokenRejection(enum.StrEnum):
    signature = "signature"
    issuer = "issuer"
    audience = "audience"
    expired = "expired"
    malformed = "malformed"


class JwtValidationError(Exception):
    def __init__(self, reason: TokenRejection, message: str) -> None:
        super().__init__(message)
        self.reason = reason


@dataclass(frozen=True, slots=True)
class JwtConfig:
    # Algorithm/issuer/audience are enforced during decoding.
    alg: str
    issuer: str
    audience: str
    secret: str
    ttl: timedelta = timedelta(hours=1)

    def __post_init__(self) -> None:
        if self.alg not in MIN_SECRET_BYTES:
            raise ValueError(f"unsupported JWT algorithm: {self.alg}")
        required = MIN_SECRET_BYTES[self.alg]
        if len(self.secret.encode("utf-8")) < required:
            raise ValueError(f"JWT secret must be at least {required} bytes for {self.alg}")
        if self.ttl <= timedelta(0):
            raise ValueError("JWT ttl must be positive")


@dataclass(frozen=True, slots=True)
class TokenClaims:
    subject: str
    username: str
    roles: frozenset[str]
    issued_at: datetime
    expires_at: datetime


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    username: str,
    roles: Iterable[str],
    now: datetime | None = None,
) -> str:
    issued = int((now or datetime.now(tz=UTC)).timestamp())
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": subject,
        "username": username,
        "roles": sorted(set(roles)),
        "iat": issued,
        "exp": issued + int(cfg.ttl.total_seconds()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_and_validate(
    *,
    cfg: JwtConfig,
    token: str,
    now: datetime | None = None,
) -> TokenClaims:
    try:
        # Signature, issuer and audience are checked by PyJWT. Timestamps are
        # checked below against `now` only, never against the local clock.
        payload = jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={
                "require": REQUIRED_CLAIMS,
                "verify_exp": False,
                "verify_iat": False,
                "verify_nbf": False,
            },
        )
    except (InvalidSignatureError, InvalidAlgorithmError) as e:
        raise JwtValidationError(TokenRejection.signature, str(e)) from e
    except InvalidIssuerError as e:
        raise JwtValidationError(TokenRejection.issuer, str(e)) from e
    except InvalidAudienceError as e:
        raise JwtValidationError(TokenRejection.audience, str(e)) from e
    except InvalidTokenError as e:
        raise JwtValidationError(TokenRejection.malformed, str(e)) from e

    exp = payload["exp"]
    iat = payload["iat"]
    if not _is_timestamp(exp) or not _is_timestamp(iat):
        raise JwtValidationError(TokenRejection.malformed, "exp and iat must be integers")

    current = (now or datetime.now(tz=UTC)).timestamp()
    if current > exp:
        raise JwtValidationError(TokenRejection.expired, "Signature has expired")

    subject = payload["sub"]
    username = payload.get("username", "")
    roles_raw = payload.get("roles", [])
    if not isinstance(subject, str) or not subject:
        raise JwtValidationError(TokenRejection.malformed, "Invalid token subject")
    if not isinstance(username, str):
        raise JwtValidationError(TokenRejection.malformed, "Invalid token username")
    if not isinstance(roles_raw, list) or not all(isinstance(r, str) for r in roles_raw):
        raise JwtValidationError(TokenRejection.malformed, "Invalid token roles")

    return TokenClaims(
        subject=subject,
        username=username,
        roles=frozenset(roles_raw),
        issued_at=datetime.fromtimestamp(iat, tz=UTC),
        expires_at=datetime.fromtimestamp(exp, tz=UTC),
    )


def _is_timestamp(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# --- Module Notes -----------------------------------------------------------
# Tokens are issued by `services.auth_service.AuthService.login` and validated by
# `auth.deps.get_principal`. No server-side session exists.
