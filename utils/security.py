"""
security helpers:
- Argon2 password hashing via argon2-cffi
- Password verification that never raises
- JTI generation for token identifiers
"""
from __future__ import annotations

import uuid

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

ph = PasswordHasher()

_dummy_hash: str | None = None


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2 (random salt per hash)
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """ Verify a plaintext password against a stored argon2 hash.
    Returns False on mismatch or on a missing/malformed hash.
    """
    if not isinstance(password, str) or not password_hash:
        return False
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def burn_verification(password: str) -> None:
    """Spend one hash comparison against a throwaway hash.
    Used when the account is unknown so the response time does not tell
    callers whether a username exists.
    """
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = ph.hash(uuid.uuid4().hex)
    verify_password(password or "", _dummy_hash)


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())
