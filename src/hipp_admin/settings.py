"""
hipp_admin.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Fail fast at startup when a required value is missing or malformed.
- Hide secrets from repr/logging (JWT secret, seed admin password).
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from hipp_admin.auth.jwt import MIN_SECRET_BYTES


class Settings(BaseSettings):
    """
    Read once at process startup and passed explicitly to the app factory.

    JWT issuer, audience and secret have no defaults: a deployment that does not
    provide them must not start.
    """

    model_config = SettingsConfigDict(
        env_prefix="HIPP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "hipp-admin"
    log_level: str = "INFO"
    # False renders human-readable console lines (local development).
    log_json: bool = True

    api_host: str = "0.0.0.0"
    api_port: int = 8080
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Auth
    jwt_alg: Literal["HS256", "HS384", "HS512"] = "HS256"
    jwt_issuer: str
    jwt_audience: str
    jwt_secret: SecretStr = Field(repr=False)
    jwt_expire_minutes: int = Field(default=60, ge=1, le=10080)

    # Password hashing and policy
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    password_min_length: int = Field(default=5, ge=1, le=128)
    password_require_digit: bool = False
    password_require_lowercase: bool = True
    password_require_uppercase: bool = False
    password_require_non_alphanumeric: bool = False

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./hipp.db"

    # Bootstrap data
    seed_on_startup: bool = True
    seed_admin_username: str = "HippAdmin"
    seed_admin_email: str = "hippadmin@hipp.com"
    seed_admin_password: SecretStr | None = Field(default=None, repr=False)

    @field_validator("jwt_issuer", "jwt_audience")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must be set and non-empty")
        return v.strip()

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("database_url must be set and non-empty")
        try:
            make_url(v.strip())
        except ArgumentError as e:
            raise ValueError(f"database_url is not a valid SQLAlchemy URL: {e}") from e
        return v.strip()

    @model_validator(mode="after")
    def validate_jwt_secret_length(self) -> Settings:
        # HMAC keys shorter than the digest size weaken the signature.
        secret = self.jwt_secret.get_secret_value()
        required = MIN_SECRET_BYTES[self.jwt_alg]
        if len(secret.encode("utf-8")) < required:
            raise ValueError(
                f"jwt_secret must be at least {required} bytes for {self.jwt_alg}"
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars; the process reads its configuration once.
    return Settings()  # type: ignore[call-arg]


# --- Module Notes -----------------------------------------------------------
# Route handlers never call `get_settings()`; they read the instance stored on
# `app.state` by `api.app.create_app` so tests can inject their own Settings.
