"""Spool multipart image uploads to UPLOAD_TMP_DIR before they go to object storage."""

import asyncio
import uuid
from pathlib import Path
from typing import TYPE_CHECKING

from fastapi import HTTPException, UploadFile, status

if TYPE_CHECKING:
    from vidtube.core.config import Settings

ALLOWED_IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})


def _bad_upload(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"code": code, "message": message},
    )


async def save_upload_to_temp(
    file: UploadFile | None,
    settings: "Settings",
    field_name: str,
) -> Path | None:
    """
    Write an uploaded image to a uniquely named temp file and return its path.

    Returns None when no file was sent. Rejects non-image extensions and files
    larger than MAX_UPLOAD_FILE_BYTES with 400.
    """
    if file is None:
        return None
    filename = file.filename or ""
    if not filename:
        return None
    suffix = Path(filename).suffix.lower()
    if suffix not in ALLOWED_IMAGE_EXTENSIONS:
        raise _bad_upload(
            f"{field_name}_invalid_type",
            f"{field_name} must be one of: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}",
        )
    content = await file.read()
    if not content:
        return None
    if len(content) > settings.MAX_UPLOAD_FILE_BYTES:
        raise _bad_upload(
            f"{field_name}_too_large",
            f"{field_name} must not exceed {settings.MAX_UPLOAD_FILE_BYTES} bytes",
        )
    tmp_dir = Path(settings.UPLOAD_TMP_DIR)
    path = tmp_dir / f"{uuid.uuid4().hex}{suffix}"

    def _write() -> None:
        tmp_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    await asyncio.to_thread(_write)
    return path


def discard_temp_files(*paths: Path | None) -> None:
    """Remove spooled files that never reached object storage."""
    for path in paths:
        if path is not None:
            path.unlink(missing_ok=True)
