"""
hipp_admin.errors

Domain error taxonomy.

Responsibilities:
- Name each failure class the service layer can surface.
- Carry the HTTP status each class maps to at the API boundary.
"""

from __future__ import annotations

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
)


class AdminServiceError(Exception):
    status_code: int = HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthenticationError(AdminServiceError):
    """Bad credentials. The message never says which half was wrong."""

    status_code = HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Invalid username or password") -> None:
        super().__init__(message)


class ValidationFailed(AdminServiceError):
    status_code = HTTP_400_BAD_REQUEST


class DuplicateError(ValidationFailed):
    pass


class MembershipError(ValidationFailed):
    """Assign of a held role or remove of a role that is not held."""


class NotFoundError(AdminServiceError):
    status_code = HTTP_404_NOT_FOUND
