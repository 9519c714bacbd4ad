"""Upload avatar and cover images to Cloudinary's REST API.

``upload`` never raises for storage problems: it returns None when no URL
was produced (not configured, network error, non-2xx, or a response without
a URL) and callers treat that as "no image". The local temp file is removed
after every attempt.
"""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from vidtube.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedMedia:
    url: str
    public_id: str | None = None


def _sign_params(params: dict[str, str], api_secret: str) -> str:
    """Cloudinary signature: SHA-1 of sorted ``k=v`` pairs joined by '&', then the secret."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k])
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


def _remove_local_file(local_path: Path) -> None:
    try:
        local_path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove temp upload", extra={"path": str(local_path), "error": str(e)})


class MediaStorage:
    """Cloudinary uploader; the HTTP client is owned by the app lifespan."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient) -> None:
        self.settings = settings
        self.client = client

    @property
    def configured(self) -> bool:
        return self.settings.storage_configured

    def _upload_url(self) -> str:
        cloud_name = (self.settings.CLOUDINARY_CLOUD_NAME or "").strip()
        return f"{self.settings.CLOUDINARY_API_BASE}/{cloud_name}/auto/upload"

    async def upload(self, local_path: str | Path | None) -> UploadedMedia | None:
        """Upload one local file; return its URL or None if no URL was produced."""
        if not local_path:
            return None
        path = Path(local_path)
        try:
            if not self.configured:
                logger.warning("Object storage is not configured; skipping upload")
                return None
            if not path.is_file():
                logger.warning("Upload file not found", extra={"path": str(path)})
                return None
            return await self._post(path)
        finally:
            _remove_local_file(path)

    async def _post(self, path: Path) -> UploadedMedia | None:
        secret = self.settings.CLOUDINARY_API_SECRET
        api_secret = secret.get_secret_value() if secret is not None else ""
        params = {"timestamp": str(int(time.time()))}
        folder = (self.settings.CLOUDINARY_FOLDER or "").strip()
        if folder:
            params["folder"] = folder
        data = {
            **params,
            "api_key": (self.settings.CLOUDINARY_API_KEY or "").strip(),
            "signature": _sign_params(params, api_secret),
        }
        try:
            content = path.read_bytes()
            resp = await self.client.post(
                self._upload_url(),
                data=data,
                files={"file": (path.name, content)},
                timeout=self.settings.CLOUDINARY_REQUEST_TIMEOUT_SEC,
            )
        except (httpx.HTTPError, OSError) as e:
            logger.warning(
                "Object storage upload failed",
                extra={"error_type": type(e).__name__, "file_name": path.name},
            )
            return None

        if resp.status_code >= 400:
            logger.warning(
                "Object storage rejected upload",
                extra={"status_code": resp.status_code, "body": resp.text[:500] if resp.text else ""},
            )
            return None
        try:
            body = resp.json()
        except ValueError:
            logger.warning("Object storage response is not valid JSON")
            return None
        url = body.get("secure_url") or body.get("url")
        if not url:
            logger.warning("Object storage response missing url")
            return None
        logger.info("File uploaded to object storage", extra={"public_id": body.get("public_id")})
        return UploadedMedia(url=url, public_id=body.get("public_id"))
