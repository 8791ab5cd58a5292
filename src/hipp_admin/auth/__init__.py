"""
hipp_admin.auth

Authentication/authorization package.

Responsibilities:
- Password hashing and password policy.
- JWT issuing and validation.
- FastAPI auth dependencies (Principal + role gate).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Nothing in this package touches the database; token validation stays stateless.
