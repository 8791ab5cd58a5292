"""
hipp_admin.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Own the identity schema: users, roles and the user_roles join table.
- Provide engine/session setup and repositories.
"""

# Package marker.
