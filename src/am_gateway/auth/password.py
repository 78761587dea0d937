"""Password hashing utilities using bcrypt.

Uses the ``bcrypt`` library directly (>=4.0); passlib is unmaintained and
incompatible with bcrypt >=4.
"""

import bcrypt

# Verified against when the e-mail is unknown so login latency does not
# reveal whether an account exists.
_DUMMY_HASH: bytes = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt())


def hash_password(plain: str) -> str:
    """Hash a plain-text password with bcrypt. Returns a utf-8 hash string."""
    hashed_bytes: bytes = bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt())
    return hashed_bytes.decode("utf-8")


def verify_password(plain: str, hashed: str | None) -> bool:
    """Verify a plain-text password against a bcrypt hash.

    ``hashed=None`` burns one bcrypt round against a dummy hash and returns False.
    """
    if hashed is None:
        bcrypt.checkpw(plain.encode("utf-8"), _DUMMY_HASH)
        return False
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
