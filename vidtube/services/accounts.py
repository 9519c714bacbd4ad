"""Account lifecycle outside of sessions: registration, profile edits, channel lookup."""

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import func, select

from vidtube.core.errors import Err, ErrorKind, Ok, Result
from vidtube.core.security import (
    FULL_NAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    hash_password,
    password_length_ok,
)
from vidtube.models.account import Account
from vidtube.models.subscription import Subscription
from vidtube.schemas.account import AccountPublic, ChannelProfile
from vidtube.services.account_store import AccountStore, normalize_identifier
from vidtube.services.media_storage import MediaStorage

if TYPE_CHECKING:
    from vidtube.core.config import Settings

logger = logging.getLogger(__name__)


def _required(**fields: str | None) -> Err | None:
    """First blank field as an INVALID_INPUT error, in argument order."""
    for name, value in fields.items():
        if not (value or "").strip():
            return Err(ErrorKind.INVALID_INPUT, f"{name} is required", code=f"{name}_required")
    return None


def _length_error(username: str | None = None, full_name: str | None = None) -> Err | None:
    """Column-width checks for username and fullName (both stored in 255-char columns)."""
    if username is not None and not USERNAME_MIN_LEN <= len(username.strip()) <= USERNAME_MAX_LEN:
        return Err(
            ErrorKind.INVALID_INPUT,
            f"username must be {USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} characters",
            code="username_length",
        )
    if full_name is not None and len(full_name.strip()) > FULL_NAME_MAX_LEN:
        return Err(
            ErrorKind.INVALID_INPUT,
            f"fullName must be at most {FULL_NAME_MAX_LEN} characters",
            code="fullName_length",
        )
    return None


def _email_error(email: str) -> Err | None:
    try:
        validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError:
        return Err(ErrorKind.INVALID_INPUT, "email is not a valid address", code="email_invalid")
    return None


class AccountService:
    """Registration and profile operations; uploads go through MediaStorage."""

    def __init__(self, store: AccountStore, settings: "Settings", media: MediaStorage) -> None:
        self.store = store
        self.settings = settings
        self.media = media

    async def _upload_url(self, local_path: str | Path | None) -> str | None:
        if not local_path:
            return None
        uploaded = await self.media.upload(local_path)
        return uploaded.url if uploaded is not None else None

    async def register(
        self,
        *,
        full_name: str | None,
        email: str | None,
        username: str | None,
        password: str | None,
        avatar_path: str | Path | None = None,
        cover_image_path: str | Path | None = None,
    ) -> Result[AccountPublic]:
        """
        Create an account with a hashed password and optional avatar/cover images.

        Upload failures do not fail registration; the image URL is left empty.
        """
        missing = _required(fullName=full_name, email=email, username=username, password=password)
        if missing is not None:
            return missing
        email, username, password = email or "", username or "", password or ""
        too_long = _length_error(username=username, full_name=full_name)
        if too_long is not None:
            return too_long
        bad_email = _email_error(email)
        if bad_email is not None:
            return bad_email
        if not password_length_ok(password):
            return Err(
                ErrorKind.INVALID_INPUT,
                f"password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters",
                code="password_length",
            )

        existing = await self.store.find_by_username_or_email(username=username, email=email)
        if existing is not None:
            return Err(
                ErrorKind.CONFLICT,
                "User with email or username already exists",
                code="account_exists",
            )

        avatar_url = await self._upload_url(avatar_path)
        cover_image_url = await self._upload_url(cover_image_path)
        password_hash = await asyncio.to_thread(hash_password, password, self.settings.BCRYPT_ROUNDS)

        created = await self.store.create(
            username=username,
            email=email,
            full_name=full_name or "",
            password_hash=password_hash,
            avatar_url=avatar_url,
            cover_image_url=cover_image_url,
        )
        if isinstance(created, Err):
            return created

        view = await self.store.find_public_by_id(created.value.id)
        if view is None:
            return Err(ErrorKind.FATAL, "Something went wrong while registering the user")
        logger.info("Account registered", extra={"account_id": view.id})
        return Ok(view)

    async def update_details(
        self,
        account_id: str,
        *,
        full_name: str | None = None,
        username: str | None = None,
        email: str | None = None,
    ) -> Result[AccountPublic]:
        """Change display name, username and/or email; no password check needed."""
        values: dict[str, str] = {}
        if full_name is not None and full_name.strip():
            values["full_name"] = full_name.strip()
        if username is not None and username.strip():
            values["username"] = username
        if email is not None and email.strip():
            bad_email = _email_error(email)
            if bad_email is not None:
                return bad_email
            values["email"] = email
        if not values:
            return Err(
                ErrorKind.INVALID_INPUT,
                "At least one of fullName, username or email is required",
                code="nothing_to_update",
            )
        too_long = _length_error(username=values.get("username"), full_name=values.get("full_name"))
        if too_long is not None:
            return too_long
        return await self.store.update_fields(account_id, **values)

    async def update_avatar(self, account_id: str, local_path: str | Path | None) -> Result[AccountPublic]:
        if not local_path:
            return Err(ErrorKind.INVALID_INPUT, "Avatar file is missing", code="avatar_required")
        url = await self._upload_url(local_path)
        if not url:
            return Err(ErrorKind.INVALID_INPUT, "Error while uploading avatar", code="avatar_upload_failed")
        return await self.store.update_fields(account_id, avatar_url=url)

    async def update_cover_image(
        self, account_id: str, local_path: str | Path | None
    ) -> Result[AccountPublic]:
        if not local_path:
            return Err(ErrorKind.INVALID_INPUT, "Cover image file is missing", code="cover_image_required")
        url = await self._upload_url(local_path)
        if not url:
            return Err(
                ErrorKind.INVALID_INPUT,
                "Error while uploading cover image",
                code="cover_image_upload_failed",
            )
        return await self.store.update_fields(account_id, cover_image_url=url)

    async def get_channel_profile(
        self,
        username: str | None,
        viewer_id: str | None = None,
    ) -> Result[ChannelProfile]:
        """Public channel page with subscriber counts, as seen by ``viewer_id``."""
        u = normalize_identifier(username)
        if not u:
            return Err(ErrorKind.INVALID_INPUT, "username is required", code="username_required")

        session = self.store.session
        subscriber_count = (
            select(func.count(Subscription.id))
            .where(Subscription.channel_id == Account.id)
            .scalar_subquery()
        )
        subscribed_to_count = (
            select(func.count(Subscription.id))
            .where(Subscription.subscriber_id == Account.id)
            .scalar_subquery()
        )
        result = await session.execute(
            select(
                Account.id,
                Account.username,
                Account.email,
                Account.full_name,
                Account.avatar_url,
                Account.cover_image_url,
                subscriber_count.label("subscriber_count"),
                subscribed_to_count.label("channels_subscribed_to_count"),
            ).where(Account.username == u)
        )
        row = result.mappings().first()
        if row is None:
            return Err(ErrorKind.NOT_FOUND, "Channel does not exist", code="channel_not_found")

        is_subscribed = False
        if viewer_id:
            found = await session.execute(
                select(Subscription.id).where(
                    Subscription.channel_id == row["id"],
                    Subscription.subscriber_id == viewer_id,
                )
            )
            is_subscribed = found.first() is not None

        return Ok(ChannelProfile.model_validate({**dict(row), "is_subscribed": is_subscribed}))
