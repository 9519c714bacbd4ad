"""Registration, login/logout, token refresh, password change, and the auth dependency."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status

from vidtube.api.v1.deps import (
    get_account_service,
    get_account_store,
    get_app_settings,
    get_session_service,
)
from vidtube.api.v1.responses import unwrap
from vidtube.api.v1.uploads import discard_temp_files, save_upload_to_temp
from vidtube.core.config import Settings
from vidtube.schemas.account import AccountPublic
from vidtube.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RefreshRequest,
    TokenPair,
)
from vidtube.services.account_store import AccountStore
from vidtube.services.accounts import AccountService
from vidtube.services.auth_gate import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    authenticate,
    extract_token,
)
from vidtube.services.sessions import SessionService

router = APIRouter()


def _set_token_cookies(response: Response, tokens: TokenPair, settings: Settings) -> None:
    """httpOnly + secure cookies on every token-issuing response."""
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        tokens.access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=True,
        samesite=settings.COOKIE_SAMESITE,
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        tokens.refresh_token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=True,
        samesite=settings.COOKIE_SAMESITE,
    )


def _clear_token_cookies(response: Response, settings: Settings) -> None:
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(name, httponly=True, secure=True, samesite=settings.COOKIE_SAMESITE)


async def get_current_account(
    request: Request,
    store: Annotated[AccountStore, Depends(get_account_store)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AccountPublic:
    """Dependency: require a valid access token (cookie first, then Bearer header). Raises 401 otherwise."""
    token = extract_token(
        request.cookies.get(ACCESS_TOKEN_COOKIE),
        request.headers.get("Authorization"),
    )
    account = unwrap(await authenticate(token, store, settings))
    request.state.account = account
    return account


@router.post("/register", response_model=AccountPublic, status_code=status.HTTP_201_CREATED)
async def register(
    service: Annotated[AccountService, Depends(get_account_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    full_name: Annotated[str | None, Form(alias="fullName")] = None,
    email: Annotated[str | None, Form()] = None,
    username: Annotated[str | None, Form()] = None,
    password: Annotated[str | None, Form()] = None,
    avatar: Annotated[UploadFile | None, File()] = None,
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
) -> AccountPublic:
    """
    Create an account from multipart form data.

    Optional `avatar` and `coverImage` image files are uploaded to object
    storage; the response never includes the password hash or refresh token.
    """
    avatar_path = await save_upload_to_temp(avatar, settings, "avatar")
    cover_image_path = await save_upload_to_temp(cover_image, settings, "coverImage")
    try:
        result = await service.register(
            full_name=full_name,
            email=email,
            username=username,
            password=password,
            avatar_path=avatar_path,
            cover_image_path=cover_image_path,
        )
    finally:
        discard_temp_files(avatar_path, cover_image_path)
    return unwrap(result)


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    response: Response,
    service: Annotated[SessionService, Depends(get_session_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> LoginResponse:
    """
    Authenticate with username or email and password.

    Returns the account plus access and refresh tokens, and sets them as
    `accessToken` / `refreshToken` httpOnly cookies.
    """
    result = unwrap(
        await service.login(body.password, username=body.username, email=body.email)
    )
    _set_token_cookies(response, result.tokens, settings)
    return LoginResponse(
        account=result.account,
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    current: Annotated[AccountPublic, Depends(get_current_account)],
    service: Annotated[SessionService, Depends(get_session_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> MessageResponse:
    """End the session: forget the stored refresh token and clear both cookies."""
    unwrap(await service.logout(current.id))
    _clear_token_cookies(response, settings)
    return MessageResponse(message="User logged out")


@router.post("/refresh-token", response_model=TokenPair)
async def refresh_token(
    request: Request,
    response: Response,
    service: Annotated[SessionService, Depends(get_session_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    body: RefreshRequest | None = None,
) -> TokenPair:
    """
    Exchange the current refresh token for a new access and refresh token.

    The `refreshToken` cookie is used when present, otherwise `refreshToken`
    from the JSON body. The presented token stops working after this call.
    """
    presented = request.cookies.get(REFRESH_TOKEN_COOKIE) or (body.refresh_token if body else None)
    tokens = unwrap(await service.refresh(presented))
    _set_token_cookies(response, tokens, settings)
    return tokens


@router.patch("/password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    current: Annotated[AccountPublic, Depends(get_current_account)],
    service: Annotated[SessionService, Depends(get_session_service)],
) -> MessageResponse:
    """Change password after verifying the old one. Existing sessions stay valid."""
    unwrap(await service.change_password(current.id, body.old_password, body.new_password))
    return MessageResponse(message="Password changed successfully")


@router.get("/me", response_model=AccountPublic)
async def get_me(
    current: Annotated[AccountPublic, Depends(get_current_account)],
) -> AccountPublic:
    """Return the authenticated account."""
    return current
