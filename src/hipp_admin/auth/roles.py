"""
hipp_admin.auth.roles

Known role names.
"""

from __future__ import annotations

import enum


class UserRole(enum.StrEnum):
    # Stored in the roles table and embedded in tokens; treat as stable API contract.
    admin = "Admin"
    menaxher = "Menaxher"
    komercialist = "Komercialist"
    shofer = "Shofer"
    etiketues = "Etiketues"


# Seeded at startup. Admins may add further roles; the roles table is the catalogue.
ALL_ROLES: tuple[str, ...] = tuple(r.value for r in UserRole)

