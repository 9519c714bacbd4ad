"""ORM model for user accounts (credentials, session token, profile)."""

import uuid

from sqlalchemy import Column, DateTime, String, Text

from vidtube.models.base import Base, utcnow


def _new_account_id() -> str:
    return uuid.uuid4().hex


class Account(Base):
    """
    User account for JWT authentication; also the "channel" other accounts subscribe to.

    username and email are stored trimmed and lowercased.
    refresh_token holds the single live refresh token (NULL when logged out).
    """

    __tablename__ = "accounts"

    id = Column(String(32), primary_key=True, default=_new_account_id)
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(320), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=False, index=True)
    avatar_url = Column(String(2048), nullable=True)
    cover_image_url = Column(String(2048), nullable=True)
    password_hash = Column(String(255), nullable=False)
    refresh_token = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )


# Columns safe to return to clients (no password hash, no refresh token).
PUBLIC_COLUMNS = (
    Account.id,
    Account.username,
    Account.email,
    Account.full_name,
    Account.avatar_url,
    Account.cover_image_url,
    Account.created_at,
    Account.updated_at,
)
