"""
hipp_admin.auth.passwords

Password hashing and password policy.

Responsibilities:
- Hash passwords with bcrypt (salted, slow) for storage.
- Verify submitted passwords against stored hashes without raising.
- Enforce the configurable password policy on create/reset/change.
"""

from __future__ import annotations

from dataclasses import dataclass

import bcrypt

# bcrypt only uses the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72
PASSWORD_MAX_LEN = 128


@dataclass(frozen=True, slots=True)
class PasswordHasher:
    rounds: int = 12

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage. Do not store plain passwords."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, hashed: str | None, plain_password: str) -> bool:
        """Constant-time check of a plain password against a stored hash."""
        if not hashed:
            return False
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False


@dataclass(frozen=True, slots=True)
class PasswordPolicy:
    min_length: int = 5
    require_digit: bool = False
    require_lowercase: bool = True
    require_uppercase: bool = False
    require_non_alphanumeric: bool = False

    def violations(self, password: str) -> list[str]:
        errors: list[str] = []
        if len(password) < self.min_length:
            errors.append(f"Passwords must be at least {self.min_length} characters.")
        if len(password) > PASSWORD_MAX_LEN:
            errors.append(f"Passwords must be at most {PASSWORD_MAX_LEN} characters.")
        if self.require_digit and not any(c.isdigit() for c in password):
            errors.append("Passwords must have at least one digit ('0'-'9').")
        if self.require_lowercase and not any(c.islower() for c in password):
            errors.append("Passwords must have at least one lowercase ('a'-'z').")
        if self.require_uppercase and not any(c.isupper() for c in password):
            errors.append("Passwords must have at least one uppercase ('A'-'Z').")
        if self.require_non_alphanumeric and all(c.isalnum() for c in password):
            errors.append("Passwords must have at least one non alphanumeric character.")
        return errors


# --- Module Notes -----------------------------------------------------------
# Both objects are built once from Settings in `api.app.create_app` and shared
# through `app.state`.
