"""
hipp_admin.db.repositories

Repository package.

Responsibilities:
- Group data-access repositories for the credential store and role memberships.
"""

# Package marker; repositories are imported directly from submodules.


# --- Module Notes -----------------------------------------------------------
# Repositories only flush; commit/rollback belongs to the service layer.
