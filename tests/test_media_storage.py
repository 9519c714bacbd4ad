"""Tests for vidtube.services.media_storage using httpx.MockTransport in place of Cloudinary."""

import hashlib
import tempfile
import unittest
from pathlib import Path

import httpx

from support import UPLOADED_URL, cloudinary_settings, cloudinary_transport, make_settings
from vidtube.services.media_storage import MediaStorage, _sign_params


class TestSignParams(unittest.TestCase):
    def test_signature_over_sorted_params(self) -> None:
        expected = hashlib.sha1(b"folder=vidtube&timestamp=1700000000cloud-secret").hexdigest()
        signature = _sign_params({"timestamp": "1700000000", "folder": "vidtube"}, "cloud-secret")
        self.assertEqual(signature, expected)


class MediaStorageTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_dir = self._tmp.name
        self.calls: list[httpx.Request] = []
        self.local_file = Path(self.tmp_dir) / "avatar.png"
        self.local_file.write_bytes(b"\x89PNG\r\n\x1a\nfake-image")

    async def asyncTearDown(self) -> None:
        self._tmp.cleanup()

    async def upload_with(self, transport: httpx.MockTransport, configured: bool = True):
        settings = cloudinary_settings(self.tmp_dir) if configured else make_settings(self.tmp_dir)
        async with httpx.AsyncClient(transport=transport) as client:
            return await MediaStorage(settings, client).upload(self.local_file)


class TestUpload(MediaStorageTestCase):
    async def test_successful_upload_returns_secure_url(self) -> None:
        uploaded = await self.upload_with(cloudinary_transport(self.calls))
        self.assertEqual(uploaded.url, UPLOADED_URL)
        self.assertEqual(uploaded.public_id, "vidtube/abc")
        self.assertEqual(len(self.calls), 1)
        request = self.calls[0]
        self.assertEqual(str(request.url), "https://api.cloudinary.com/v1_1/demo/auto/upload")
        body = request.read()
        self.assertIn(b'name="signature"', body)
        self.assertIn(b'name="api_key"', body)
        self.assertIn(b"key-123", body)
        self.assertNotIn(b"cloud-secret", body)
        self.assertIn(b"fake-image", body)

    async def test_local_file_removed_after_success(self) -> None:
        await self.upload_with(cloudinary_transport(self.calls))
        self.assertFalse(self.local_file.exists())

    async def test_plain_url_used_when_secure_url_absent(self) -> None:
        transport = cloudinary_transport(self.calls, body={"url": "http://res.cloudinary.com/x.png"})
        uploaded = await self.upload_with(transport)
        self.assertEqual(uploaded.url, "http://res.cloudinary.com/x.png")

    async def test_error_status_returns_none_and_removes_file(self) -> None:
        transport = cloudinary_transport(self.calls, status_code=500, body={"error": {"message": "boom"}})
        self.assertIsNone(await self.upload_with(transport))
        self.assertFalse(self.local_file.exists())

    async def test_response_without_url_returns_none(self) -> None:
        self.assertIsNone(await self.upload_with(cloudinary_transport(self.calls, body={"public_id": "x"})))

    async def test_transport_error_returns_none_and_removes_file(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        self.assertIsNone(await self.upload_with(httpx.MockTransport(handler)))
        self.assertFalse(self.local_file.exists())

    async def test_not_configured_skips_request_and_removes_file(self) -> None:
        self.assertIsNone(await self.upload_with(cloudinary_transport(self.calls), configured=False))
        self.assertEqual(self.calls, [])
        self.assertFalse(self.local_file.exists())

    async def test_missing_path_returns_none(self) -> None:
        settings = cloudinary_settings(self.tmp_dir)
        async with httpx.AsyncClient(transport=cloudinary_transport(self.calls)) as client:
            storage = MediaStorage(settings, client)
            self.assertIsNone(await storage.upload(None))
            self.assertIsNone(await storage.upload(Path(self.tmp_dir) / "nope.png"))
        self.assertEqual(self.calls, [])


if __name__ == "__main__":
    unittest.main()
