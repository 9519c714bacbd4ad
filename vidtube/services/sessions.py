"""Session rotation: login, refresh, logout and password change.

One refresh token is live per account. Login overwrites it (ending any older
session), refresh swaps it for a new one only if the presented token is still
the stored one, and logout clears it.
"""

import asyncio
import hmac
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from vidtube.core.errors import Err, ErrorKind, Ok, Result
from vidtube.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    hash_password,
    password_length_ok,
    verify_password,
)
from vidtube.core.tokens import issue_access_token, issue_refresh_token, verify_refresh_token
from vidtube.models.account import Account
from vidtube.schemas.account import AccountPublic
from vidtube.schemas.auth import TokenPair
from vidtube.services.account_store import AccountStore

if TYPE_CHECKING:
    from vidtube.core.config import Settings

logger = logging.getLogger(__name__)

TOKEN_GENERATION_FAILED = "Something went wrong while generating access and refresh token"


@dataclass(frozen=True)
class LoginResult:
    account: AccountPublic
    tokens: TokenPair


def _unauthorized(message: str, code: str) -> Err:
    return Err(ErrorKind.UNAUTHORIZED, message, code=code)


class SessionService:
    """Issues, rotates and revokes an account's session tokens."""

    def __init__(self, store: AccountStore, settings: "Settings") -> None:
        self.store = store
        self.settings = settings

    async def generate_access_and_refresh_tokens(self, account: Account) -> Result[TokenPair]:
        """Mint a token pair for ``account`` and persist the refresh token on it."""
        try:
            access = issue_access_token(
                account_id=account.id,
                username=account.username,
                full_name=account.full_name,
                email=account.email,
                settings=self.settings,
            )
            refresh = issue_refresh_token(account.id, self.settings)
            stored = await self.store.set_refresh_token(account.id, refresh)
        except Exception:
            logger.exception("Token generation failed", extra={"account_id": account.id})
            return Err(ErrorKind.FATAL, TOKEN_GENERATION_FAILED, code="token_generation_failed")
        if not stored:
            logger.error("Token generation failed: account vanished", extra={"account_id": account.id})
            return Err(ErrorKind.FATAL, TOKEN_GENERATION_FAILED, code="token_generation_failed")
        return Ok(TokenPair(access_token=access, refresh_token=refresh))

    async def login(
        self,
        password: str,
        username: str | None = None,
        email: str | None = None,
    ) -> Result[LoginResult]:
        """
        Authenticate by username or email and start a new session.

        Any earlier session of the same account is revoked because its refresh
        token is overwritten.
        """
        if not (username or "").strip() and not (email or "").strip():
            return Err(ErrorKind.INVALID_INPUT, "username or email is required", code="identifier_required")
        if not password:
            return Err(ErrorKind.INVALID_INPUT, "password is required", code="password_required")

        account = await self.store.find_by_username_or_email(username=username, email=email)
        if account is None:
            return Err(ErrorKind.NOT_FOUND, "User does not exist", code="account_not_found")

        valid = await asyncio.to_thread(verify_password, password, account.password_hash)
        if not valid:
            logger.info("Login rejected", extra={"account_id": account.id, "reason": "bad_password"})
            return _unauthorized("Invalid user credentials", "invalid_credentials")

        tokens = await self.generate_access_and_refresh_tokens(account)
        if isinstance(tokens, Err):
            return tokens

        view = await self.store.find_public_by_id(account.id)
        if view is None:
            logger.error("Login failed: account vanished", extra={"account_id": account.id})
            return Err(ErrorKind.FATAL, TOKEN_GENERATION_FAILED, code="token_generation_failed")
        logger.info("Login succeeded", extra={"account_id": account.id})
        return Ok(LoginResult(account=view, tokens=tokens.value))

    async def refresh(self, presented: str | None) -> Result[TokenPair]:
        """
        Exchange a current refresh token for a new access + refresh pair.

        Every failure is UNAUTHORIZED so callers learn nothing about why a
        token was refused.
        """
        if not presented or not presented.strip():
            return _unauthorized("Unauthorized request", "refresh_token_missing")

        claims = verify_refresh_token(presented, self.settings)
        if isinstance(claims, Err):
            logger.info("Refresh rejected", extra={"reason": claims.error_code})
            return _unauthorized("Invalid refresh token", "refresh_token_invalid")

        account = await self.store.find_by_id(claims.value["sub"])
        if account is None:
            logger.info("Refresh rejected", extra={"reason": "account_not_found"})
            return _unauthorized("Invalid refresh token", "refresh_token_invalid")

        stored = account.refresh_token or ""
        if not hmac.compare_digest(presented.encode("utf-8"), stored.encode("utf-8")):
            logger.info("Refresh rejected", extra={"account_id": account.id, "reason": "not_current"})
            return _unauthorized("Refresh token expired or used", "refresh_token_reused")

        try:
            access = issue_access_token(
                account_id=account.id,
                username=account.username,
                full_name=account.full_name,
                email=account.email,
                settings=self.settings,
            )
            new_refresh = issue_refresh_token(account.id, self.settings)
            rotated = await self.store.rotate_refresh_token(account.id, presented, new_refresh)
        except Exception:
            logger.exception("Token generation failed", extra={"account_id": account.id})
            return Err(ErrorKind.FATAL, TOKEN_GENERATION_FAILED, code="token_generation_failed")
        if not rotated:
            # A concurrent refresh (or a login/logout) replaced the token first.
            logger.info("Refresh rejected", extra={"account_id": account.id, "reason": "lost_rotation"})
            return _unauthorized("Refresh token expired or used", "refresh_token_reused")

        return Ok(TokenPair(access_token=access, refresh_token=new_refresh))

    async def logout(self, account_id: str) -> Result[None]:
        """Clear the stored refresh token. Logging out twice is not an error."""
        await self.store.clear_refresh_token(account_id)
        logger.info("Logout", extra={"account_id": account_id})
        return Ok(None)

    async def change_password(
        self,
        account_id: str,
        old_password: str,
        new_password: str,
    ) -> Result[None]:
        """Verify the old password and store a hash of the new one; sessions are left alone."""
        if not old_password or not new_password:
            return Err(
                ErrorKind.INVALID_INPUT,
                "Old and new password are required",
                code="password_required",
            )
        if not password_length_ok(new_password):
            return Err(
                ErrorKind.INVALID_INPUT,
                f"New password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters",
                code="password_length",
            )

        account = await self.store.find_by_id(account_id)
        if account is None:
            return Err(ErrorKind.NOT_FOUND, "User does not exist", code="account_not_found")

        valid = await asyncio.to_thread(verify_password, old_password, account.password_hash)
        if not valid:
            logger.info("Password change rejected", extra={"account_id": account_id})
            return _unauthorized("Invalid old password", "invalid_old_password")

        new_hash = await asyncio.to_thread(hash_password, new_password, self.settings.BCRYPT_ROUNDS)
        updated = await self.store.update_fields(account_id, password_hash=new_hash)
        if isinstance(updated, Err):
            return updated
        logger.info("Password changed", extra={"account_id": account_id})
        return Ok(None)
