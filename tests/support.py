"""Shared fixtures for tests: settings, a throwaway SQLite database, and a fake Cloudinary."""

import json
import tempfile
import unittest
from pathlib import Path
from typing import Any

import httpx

from vidtube.core.config import Settings
from vidtube.core.database import Database
from vidtube.core.errors import Ok
from vidtube.core.security import hash_password
from vidtube.models import Account
from vidtube.services.account_store import AccountStore

TEST_PASSWORD = "correct-horse-1"
UPLOADED_URL = "https://res.cloudinary.com/demo/image/upload/v1/vidtube/abc.png"


def make_settings(tmp_dir: str, **overrides: Any) -> Settings:
    """Settings for one test: SQLite under tmp_dir, cheap bcrypt, no .env."""
    values: dict[str, Any] = {
        "APP_ENV": "dev",
        "DATABASE_URL": f"sqlite+aiosqlite:///{Path(tmp_dir) / 'test.db'}",
        "AUTO_CREATE_TABLES": True,
        "ACCESS_TOKEN_SECRET": "test-access-secret",
        "REFRESH_TOKEN_SECRET": "test-refresh-secret",
        "BCRYPT_ROUNDS": 10,
        "UPLOAD_TMP_DIR": str(Path(tmp_dir) / "uploads"),
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def cloudinary_settings(tmp_dir: str, **overrides: Any) -> Settings:
    return make_settings(
        tmp_dir,
        CLOUDINARY_CLOUD_NAME="demo",
        CLOUDINARY_API_KEY="key-123",
        CLOUDINARY_API_SECRET="cloud-secret",
        **overrides,
    )


def cloudinary_transport(
    calls: list[httpx.Request],
    status_code: int = 200,
    body: dict[str, Any] | None = None,
) -> httpx.MockTransport:
    """Fake Cloudinary upload endpoint; records every request in ``calls``."""
    if body is None:
        body = {"secure_url": UPLOADED_URL, "public_id": "vidtube/abc"}

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(status_code, content=json.dumps(body).encode("utf-8"))

    return httpx.MockTransport(handler)


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """Fresh SQLite file per test with all tables created and an AccountStore bound to it."""

    async def asyncSetUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_dir = self._tmp.name
        self.settings = make_settings(self.tmp_dir)
        self.database = Database(self.settings.DATABASE_URL)
        await self.database.create_all()
        self.session = self.database.session()
        self.store = AccountStore(self.session)

    async def asyncTearDown(self) -> None:
        await self.session.close()
        await self.database.dispose()
        self._tmp.cleanup()

    async def create_account(
        self,
        username: str = "alice",
        email: str = "alice@example.com",
        password: str = TEST_PASSWORD,
        full_name: str = "Alice Liddell",
    ) -> Account:
        result = await self.store.create(
            username=username,
            email=email,
            full_name=full_name,
            password_hash=hash_password(password, rounds=10),
        )
        assert isinstance(result, Ok), result
        return result.value
