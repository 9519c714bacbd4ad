"""Pydantic schemas for API request and response bodies."""

from vidtube.schemas.account import AccountPublic, ChannelProfile, UpdateAccountRequest
from vidtube.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RefreshRequest,
    TokenPair,
)
from vidtube.schemas.health import HealthResponse

__all__ = [
    "AccountPublic",
    "ChangePasswordRequest",
    "ChannelProfile",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "RefreshRequest",
    "TokenPair",
    "UpdateAccountRequest",
]
