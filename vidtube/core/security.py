"""Password hashing and verification (bcrypt)."""

import bcrypt

from vidtube.core.errors import InvalidInputError

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of the input.
BCRYPT_MAX_BYTES = 72

# Min/max lengths for username, full name and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
FULL_NAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    if not plain_password:
        raise InvalidInputError("password is required")
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    if not plain_password or not hashed:
        return False
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def password_length_ok(plain_password: str) -> bool:
    return PASSWORD_MIN_LEN <= len(plain_password) <= PASSWORD_MAX_LEN
