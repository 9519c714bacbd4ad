"""JWT creation and verification for access and refresh tokens.

Access tokens carry the identity claims handlers need (id, username, full
name, email) and are signed with ACCESS_TOKEN_SECRET. Refresh tokens carry
only the account id plus a random ``jti`` and are signed with
REFRESH_TOKEN_SECRET, so a leak of one secret cannot forge the other kind.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import jwt

from vidtube.core.errors import Err, ErrorKind, Ok, Result

if TYPE_CHECKING:
    from vidtube.core.config import Settings

TOKEN_EXPIRED = "token_expired"
TOKEN_MALFORMED = "token_malformed"
TOKEN_MISSING_ID = "token_missing_id"


def issue_access_token(
    *,
    account_id: str,
    username: str,
    full_name: str,
    email: str,
    settings: "Settings",
    now: datetime | None = None,
) -> str:
    """Create a short-lived JWT access token with the account's identity claims."""
    issued_at = now or datetime.now(timezone.utc)
    expire = issued_at + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(account_id),
        "username": username,
        "full_name": full_name,
        "email": email,
        "iat": issued_at,
        "exp": expire,
    }
    return jwt.encode(
        payload,
        settings.ACCESS_TOKEN_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def issue_refresh_token(
    account_id: str,
    settings: "Settings",
    now: datetime | None = None,
) -> str:
    """Create a long-lived JWT refresh token carrying only the account id."""
    issued_at = now or datetime.now(timezone.utc)
    expire = issued_at + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    payload: dict[str, Any] = {
        "sub": str(account_id),
        # Two refresh tokens minted in the same second must still differ.
        "jti": uuid.uuid4().hex,
        "iat": issued_at,
        "exp": expire,
    }
    return jwt.encode(
        payload,
        settings.REFRESH_TOKEN_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def verify_token(token: str, secret: str, algorithm: str) -> Result[dict[str, Any]]:
    """
    Decode and validate a JWT; return Ok(claims) or Err(TOKEN_INVALID).

    The error code tells callers why: TOKEN_EXPIRED (client should refresh),
    TOKEN_MALFORMED (bad signature or structure) or TOKEN_MISSING_ID.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        return Err(ErrorKind.TOKEN_INVALID, "Token has expired", code=TOKEN_EXPIRED)
    except jwt.PyJWTError:
        return Err(ErrorKind.TOKEN_INVALID, "Token is invalid", code=TOKEN_MALFORMED)

    sub = payload.get("sub")
    if not sub or not isinstance(sub, str):
        return Err(ErrorKind.TOKEN_INVALID, "Token payload has no account id", code=TOKEN_MISSING_ID)
    return Ok(payload)


def verify_access_token(token: str, settings: "Settings") -> Result[dict[str, Any]]:
    return verify_token(
        token,
        settings.ACCESS_TOKEN_SECRET.get_secret_value(),
        settings.JWT_ALGORITHM,
    )


def verify_refresh_token(token: str, settings: "Settings") -> Result[dict[str, Any]]:
    return verify_token(
        token,
        settings.REFRESH_TOKEN_SECRET.get_secret_value(),
        settings.JWT_ALGORITHM,
    )
