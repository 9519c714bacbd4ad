"""Credential store: persisted Account records behind an AsyncSession.

Usernames and emails are normalized (trimmed, lowercased) on every write and
lookup. Uniqueness is checked before insert and enforced by unique indexes,
so a concurrent duplicate still fails with CONFLICT instead of overwriting.
Refresh-token writes are single UPDATE statements; rotation is conditional on
the presented token still being the stored one.
"""

import logging
from typing import Any

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import Err, ErrorKind, Ok, Result
from vidtube.models.account import PUBLIC_COLUMNS, Account
from vidtube.schemas.account import AccountPublic

logger = logging.getLogger(__name__)

DUPLICATE_ACCOUNT_MESSAGE = "User with email or username already exists"

# Fields update_fields may touch; refresh_token has its own methods.
UPDATABLE_FIELDS = frozenset(
    {"username", "email", "full_name", "avatar_url", "cover_image_url", "password_hash"}
)


def normalize_identifier(value: str | None) -> str:
    return (value or "").strip().lower()


class AccountStore:
    """Reads and writes Account rows; one instance per DB session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_id(self, account_id: str) -> Account | None:
        """
        Full record including password hash and refresh token (internal use only).

        Updates below bypass the identity map, so reads repopulate loaded objects.
        """
        if not account_id:
            return None
        result = await self.session.execute(
            select(Account)
            .where(Account.id == account_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def find_public_by_id(self, account_id: str) -> AccountPublic | None:
        """Projected read that never loads password_hash or refresh_token."""
        if not account_id:
            return None
        result = await self.session.execute(
            select(*PUBLIC_COLUMNS).where(Account.id == account_id)
        )
        row = result.mappings().first()
        if row is None:
            return None
        return AccountPublic.model_validate(dict(row))

    async def find_by_username_or_email(
        self,
        username: str | None = None,
        email: str | None = None,
    ) -> Account | None:
        conditions = []
        u = normalize_identifier(username)
        e = normalize_identifier(email)
        if u:
            conditions.append(Account.username == u)
        if e:
            conditions.append(Account.email == e)
        if not conditions:
            return None
        result = await self.session.execute(
            select(Account)
            .where(or_(*conditions))
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def create(
        self,
        *,
        username: str,
        email: str,
        full_name: str,
        password_hash: str,
        avatar_url: str | None = None,
        cover_image_url: str | None = None,
    ) -> Result[Account]:
        """Insert a new account. Returns Err(CONFLICT) if username or email is taken."""
        u = normalize_identifier(username)
        e = normalize_identifier(email)
        if not u or not e:
            return Err(ErrorKind.INVALID_INPUT, "username and email are required")
        if not password_hash:
            return Err(ErrorKind.INVALID_INPUT, "password is required")

        existing = await self.find_by_username_or_email(username=u, email=e)
        if existing is not None:
            return Err(ErrorKind.CONFLICT, DUPLICATE_ACCOUNT_MESSAGE, code="account_exists")

        account = Account(
            username=u,
            email=e,
            full_name=full_name.strip(),
            password_hash=password_hash,
            avatar_url=avatar_url or None,
            cover_image_url=cover_image_url or None,
            refresh_token=None,
        )
        self.session.add(account)
        try:
            await self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same name/email.
            await self.session.rollback()
            logger.info("Account insert hit a uniqueness constraint", extra={"username": u})
            return Err(ErrorKind.CONFLICT, DUPLICATE_ACCOUNT_MESSAGE, code="account_exists")
        return Ok(account)

    async def update_fields(self, account_id: str, **values: Any) -> Result[AccountPublic]:
        """Update whitelisted fields; returns the refreshed public view."""
        unknown = set(values) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")
        if not values:
            return Err(ErrorKind.INVALID_INPUT, "Nothing to update")
        if "username" in values:
            values["username"] = normalize_identifier(values["username"])
        if "email" in values:
            values["email"] = normalize_identifier(values["email"])

        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            return Err(ErrorKind.CONFLICT, DUPLICATE_ACCOUNT_MESSAGE, code="account_exists")
        if result.rowcount == 0:
            return Err(ErrorKind.NOT_FOUND, "User does not exist")

        view = await self.find_public_by_id(account_id)
        if view is None:
            return Err(ErrorKind.NOT_FOUND, "User does not exist")
        return Ok(view)

    async def set_refresh_token(self, account_id: str, refresh_token: str) -> bool:
        """Unconditionally replace the stored refresh token. False if no such account."""
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(refresh_token=refresh_token)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    async def rotate_refresh_token(self, account_id: str, expected: str, new_token: str) -> bool:
        """
        Swap the stored refresh token only if it still equals ``expected``.

        Of two concurrent rotations presenting the same token, exactly one sees
        a matching row; the other gets False.
        """
        stmt = (
            update(Account)
            .where(Account.id == account_id, Account.refresh_token == expected)
            .values(refresh_token=new_token)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    async def clear_refresh_token(self, account_id: str) -> None:
        """Forget the stored refresh token. Idempotent."""
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(refresh_token=None)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.commit()

    async def delete(self, account_id: str) -> bool:
        result = await self.session.execute(delete(Account).where(Account.id == account_id))
        await self.session.commit()
        return result.rowcount > 0
