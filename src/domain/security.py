"""
Credential primitives - verification codes and password hashes.

Verification codes are only ever persisted as SHA-256 digests; the raw code
travels through the email channel alone. Both digest and password checks
are constant-time:

1. **secrets.compare_digest()** compares code digests.
2. **bcrypt.checkpw()** verifies passwords. When there is no stored hash
   (unknown email) a pre-computed dummy hash is checked instead, so the
   unknown-email and wrong-password paths take the same time.
"""

import hashlib
import secrets

import bcrypt

# bcrypt ignores input past this many bytes (bcrypt>=5 rejects it outright)
MAX_PASSWORD_BYTES = 72

# Hash of "dummy_password_for_timing_safety" with cost factor 10.
_DUMMY_BCRYPT_HASH = bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(10))


def generate_otp(length: int = 6) -> str:
    """
    Generate a cryptographically secure numeric verification code.

    Returns string to preserve leading zeros.
    """
    if length < 1:
        raise ValueError("OTP length must be positive")
    return "".join(secrets.choice("0123456789") for _ in range(length))


def hash_otp(code: str) -> str:
    """Return the SHA-256 hex digest stored in place of a verification code."""
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


def otp_matches(code: str, stored_hash: str | None) -> bool:
    """Check a submitted code against the stored digest in constant time."""
    if not stored_hash:
        return False
    return secrets.compare_digest(hash_otp(code).encode(), stored_hash.encode())


def hash_password(password: str, rounds: int = 10) -> str:
    """
    Hash password using bcrypt with the given cost factor.

    Raises:
        ValueError: If the password is longer than bcrypt's 72-byte input
    """
    encoded = password.encode()
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode()


def check_password(password: str, password_hash: str | None) -> bool:
    """
    Verify a password against a bcrypt hash.

    Always runs bcrypt, even when ``password_hash`` is None or the password
    is too long to have been stored, and then reports False for those cases.
    """
    encoded = password.encode()
    too_long = len(encoded) > MAX_PASSWORD_BYTES
    stored = password_hash.encode() if password_hash else _DUMMY_BCRYPT_HASH
    matched = bcrypt.checkpw(encoded[:MAX_PASSWORD_BYTES], stored)
    return matched and password_hash is not None and not too_long
