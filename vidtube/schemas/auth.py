"""Request/response schemas for auth endpoints."""

from pydantic import Field

from vidtube.schemas.account import AccountPublic, CamelModel


class LoginRequest(CamelModel):
    """Credentials for login: username or email, plus password."""

    username: str | None = Field(default=None, description="Username")
    email: str | None = Field(default=None, description="Email address")
    password: str = Field(default="", description="Password")


class RefreshRequest(CamelModel):
    """Refresh token in the body; ignored when the refreshToken cookie is present."""

    refresh_token: str | None = Field(default=None, description="JWT refresh token")


class ChangePasswordRequest(CamelModel):
    old_password: str = Field(default="")
    new_password: str = Field(default="")


class TokenPair(CamelModel):
    """Access and refresh tokens issued together."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")


class LoginResponse(TokenPair):
    """Tokens plus the signed-in account."""

    account: AccountPublic


class MessageResponse(CamelModel):
    message: str
