"""Public account views and profile-update schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for API models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AccountPublic(CamelModel):
    """Account as returned to clients and attached to authenticated requests (no secrets)."""

    id: str
    username: str
    email: str
    full_name: str
    avatar_url: str | None = None
    cover_image_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UpdateAccountRequest(CamelModel):
    """Fields a signed-in user may change without re-entering a password."""

    full_name: str | None = Field(default=None, description="Display name")
    username: str | None = Field(default=None, description="New username")
    email: str | None = Field(default=None, description="New email address")


class ChannelProfile(CamelModel):
    """Channel page for one account, seen from the requesting account."""

    id: str
    username: str
    email: str
    full_name: str
    avatar_url: str | None = None
    cover_image_url: str | None = None
    subscriber_count: int = Field(..., ge=0)
    channels_subscribed_to_count: int = Field(..., ge=0)
    is_subscribed: bool = False
