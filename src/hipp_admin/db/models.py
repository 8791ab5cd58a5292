"""
hipp_admin.db.models

Identity persistence schema.

Responsibilities:
- Define ORM models for the credential store and role membership index:
  - User: account, profile fields and password hash
  - Role: named role with description
  - user_roles: (user_id, role_id) association, no payload
- Carry the uniqueness guarantees at the storage level (normalized columns).
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hipp_admin.db.base import Base


def _utcnow() -> datetime:
    # Persist naive UTC timestamps for simplicity.
    return datetime.utcnow()


def _new_id() -> str:
    return str(uuid.uuid4())


def normalize(value: str) -> str:
    # Case-insensitive identity: "Alice" and "alice" are the same username.
    return value.strip().upper()


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column(
        "user_id",
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "role_id",
        String(36),
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)

    username: Mapped[str] = mapped_column(String(256), nullable=False)
    normalized_username: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(256), nullable=False)
    normalized_email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    email_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    first_name: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(256), nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    roles: Mapped[list[Role]] = relationship(
        secondary=user_roles,
        lazy="selectin",
        passive_deletes=True,
    )

    @property
    def role_names(self) -> list[str]:
        return sorted(r.name for r in self.roles)


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    normalized_name: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(String(1024), nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)


# --- Module Notes -----------------------------------------------------------
# The pre-checks in `UserRepo.is_*_unique` are an optimization; the unique
# constraints on the normalized columns are what keeps concurrent sign-ups apart.
