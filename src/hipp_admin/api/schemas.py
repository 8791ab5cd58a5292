"""
hipp_admin.api.schemas

Request/response models shared by several routers.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from hipp_admin.db.models import Role, User


class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    roles: list[str] = Field(default_factory=list)

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            roles=user.role_names,
        )


class RoleResponse(BaseModel):
    id: str
    name: str
    description: str = ""

    @classmethod
    def from_role(cls, role: Role) -> RoleResponse:
        return cls(id=role.id, name=role.name, description=role.description)


class MessageResponse(BaseModel):
    message: str
