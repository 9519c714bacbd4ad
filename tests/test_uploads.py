"""Tests for vidtube.api.v1.uploads: spooling multipart images to the temp directory."""

import tempfile
import unittest
from io import BytesIO
from pathlib import Path

from fastapi import HTTPException, UploadFile

from support import make_settings
from vidtube.api.v1.uploads import discard_temp_files, save_upload_to_temp


class TestSaveUploadToTemp(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.settings = make_settings(self._tmp.name, MAX_UPLOAD_FILE_BYTES=64)

    async def asyncTearDown(self) -> None:
        self._tmp.cleanup()

    async def test_image_is_written_under_upload_dir(self) -> None:
        path = await save_upload_to_temp(UploadFile(BytesIO(b"png-bytes"), filename="Me.PNG"), self.settings, "avatar")
        self.assertEqual(path.parent, Path(self.settings.UPLOAD_TMP_DIR))
        self.assertEqual(path.suffix, ".png")
        self.assertEqual(path.read_bytes(), b"png-bytes")
        discard_temp_files(path, None)
        self.assertFalse(path.exists())

    async def test_nothing_sent(self) -> None:
        self.assertIsNone(await save_upload_to_temp(None, self.settings, "avatar"))
        self.assertIsNone(await save_upload_to_temp(UploadFile(BytesIO(b"x"), filename=""), self.settings, "avatar"))
        self.assertIsNone(await save_upload_to_temp(UploadFile(BytesIO(b""), filename="a.png"), self.settings, "avatar"))

    async def test_wrong_type_rejected(self) -> None:
        with self.assertRaises(HTTPException) as ctx:
            await save_upload_to_temp(UploadFile(BytesIO(b"x"), filename="a.exe"), self.settings, "avatar")
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.detail["code"], "avatar_invalid_type")

    async def test_too_large_rejected(self) -> None:
        with self.assertRaises(HTTPException) as ctx:
            await save_upload_to_temp(UploadFile(BytesIO(b"x" * 65), filename="a.png"), self.settings, "coverImage")
        self.assertEqual(ctx.exception.detail["code"], "coverImage_too_large")


if __name__ == "__main__":
    unittest.main()
