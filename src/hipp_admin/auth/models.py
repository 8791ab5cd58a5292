"""
hipp_admin.auth.models

The caller identity that route handlers receive after token validation.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Built only from validated token claims; never re-read from the store."""

    subject: str  # user id
    username: str
    roles: frozenset[str]

    def has_any_role(self, required: frozenset[str]) -> bool:
        # An empty requirement admits any authenticated caller.
        return not required or not required.isdisjoint(self.roles)


# --- Module Notes -----------------------------------------------------------
# Roles here are the ones embedded at login; membership changes take effect on
# the next login.
