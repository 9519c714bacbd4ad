"""Profile edits and channel lookup for signed-in users."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from vidtube.api.v1.auth import get_current_account
from vidtube.api.v1.deps import get_account_service, get_app_settings
from vidtube.api.v1.responses import unwrap
from vidtube.api.v1.uploads import discard_temp_files, save_upload_to_temp
from vidtube.core.config import Settings
from vidtube.schemas.account import AccountPublic, ChannelProfile, UpdateAccountRequest
from vidtube.services.accounts import AccountService

router = APIRouter()


@router.patch("/me", response_model=AccountPublic)
async def update_me(
    body: UpdateAccountRequest,
    current: Annotated[AccountPublic, Depends(get_current_account)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> AccountPublic:
    """Update full name, username and/or email (no password required)."""
    return unwrap(
        await service.update_details(
            current.id,
            full_name=body.full_name,
            username=body.username,
            email=body.email,
        )
    )


@router.patch("/avatar", response_model=AccountPublic)
async def update_avatar(
    current: Annotated[AccountPublic, Depends(get_current_account)],
    service: Annotated[AccountService, Depends(get_account_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    avatar: Annotated[UploadFile | None, File()] = None,
) -> AccountPublic:
    """Replace the avatar with the uploaded `avatar` image."""
    path = await save_upload_to_temp(avatar, settings, "avatar")
    try:
        result = await service.update_avatar(current.id, path)
    finally:
        discard_temp_files(path)
    return unwrap(result)


@router.patch("/cover-image", response_model=AccountPublic)
async def update_cover_image(
    current: Annotated[AccountPublic, Depends(get_current_account)],
    service: Annotated[AccountService, Depends(get_account_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
) -> AccountPublic:
    """Replace the cover image with the uploaded `coverImage` image."""
    path = await save_upload_to_temp(cover_image, settings, "coverImage")
    try:
        result = await service.update_cover_image(current.id, path)
    finally:
        discard_temp_files(path)
    return unwrap(result)


@router.get("/channels/{username}", response_model=ChannelProfile)
async def get_channel_profile(
    username: str,
    current: Annotated[AccountPublic, Depends(get_current_account)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ChannelProfile:
    """Channel page: subscriber counts and whether the caller is subscribed."""
    return unwrap(await service.get_channel_profile(username, viewer_id=current.id))
