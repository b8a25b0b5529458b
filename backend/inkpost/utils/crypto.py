"""Password hashing primitives.

Pure functions with no domain knowledge. Argon2id via argon2-cffi's
high-level ``PasswordHasher``, which emits self-describing PHC strings.
"""

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(hashed: str, password: str) -> bool:
    """Return True if ``password`` matches ``hashed``. Never raises on mismatch."""
    try:
        return _hasher.verify(hashed, password)
    except (VerificationError, InvalidHashError):
        return False
