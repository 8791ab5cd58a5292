"""
hipp_admin.auth.policy

Per-route role requirements.

Responsibilities:
- Hold the required-role set for each router in one plain table.
- Routers look their entry up when they are registered (see `api/routers/*`).
"""

from __future__ import annotations

from hipp_admin.auth.roles import UserRole

# Empty set: any authenticated caller. Otherwise at least one role must match.
ROUTE_ROLES: dict[str, frozenset[str]] = {
    "profile": frozenset(),
    "users": frozenset({UserRole.admin.value}),
    "roles": frozenset({UserRole.admin.value}),
}


def required_roles(route: str) -> frozenset[str]:
    # Unknown route names are a programming error; fail at import time of the router.
    return ROUTE_ROLES[route]
