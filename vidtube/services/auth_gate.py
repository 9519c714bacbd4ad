"""Authenticate a request from its access token (cookie or Authorization header).

Read-only: resolving the identity never writes to the database, so it is safe
to run on every protected request.
"""

import logging
from typing import TYPE_CHECKING

from vidtube.core.errors import Err, ErrorKind, Ok, Result
from vidtube.core.tokens import verify_access_token
from vidtube.schemas.account import AccountPublic
from vidtube.services.account_store import AccountStore

if TYPE_CHECKING:
    from vidtube.core.config import Settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"


def extract_token(cookie_token: str | None, authorization: str | None) -> str | None:
    """
    Pick the access token for a request.

    The httpOnly cookie wins when both are present; otherwise use
    ``Authorization: Bearer <token>`` (scheme matched case-insensitively).
    """
    if cookie_token and cookie_token.strip():
        return cookie_token.strip()
    if not authorization:
        return None
    scheme, _, credentials = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    credentials = credentials.strip()
    return credentials or None


def _unauthenticated(message: str, code: str) -> Err:
    return Err(ErrorKind.UNAUTHENTICATED, message, code=code)


async def authenticate(
    token: str | None,
    store: AccountStore,
    settings: "Settings",
) -> Result[AccountPublic]:
    """
    Verify an access token and load the account it names (without secrets).

    Expired tokens keep their ``token_expired`` code so clients know to call
    the refresh endpoint instead of logging in again.
    """
    if not token:
        return _unauthenticated("Unauthorized request", "missing_token")

    claims = verify_access_token(token, settings)
    if isinstance(claims, Err):
        return _unauthenticated("Invalid access token", claims.error_code)

    account_id = claims.value["sub"]
    try:
        account = await store.find_public_by_id(account_id)
    except Exception:
        logger.exception("Account lookup failed during authentication", extra={"account_id": account_id})
        return _unauthenticated("Invalid access token", "account_lookup_failed")
    if account is None:
        return _unauthenticated("Invalid access token", "account_not_found")
    return Ok(account)
