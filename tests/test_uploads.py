"""
Tests for media upload handling
"""
import io
import os

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from songqueue.config import settings
from songqueue.exceptions import FileTooLarge, InvalidFileType, ValidationError
from songqueue.utils import generate_unique_filename, save_upload_file, validate_media_type


def make_upload(content: bytes, filename: str, content_type: str) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


class TestFileHandler:
    """Test file validation and storage"""

    @pytest.fixture(autouse=True)
    def upload_dir(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
        self.upload_dir = tmp_path

    def test_allowed_media_types(self):
        """Test image, audio and video are allowed"""
        assert validate_media_type("image/png") == "image/png"
        assert validate_media_type("AUDIO/MPEG") == "audio/mpeg"
        assert validate_media_type("video/mp4") == "video/mp4"

    @pytest.mark.parametrize("content_type", ["application/pdf", "text/plain", "", None])
    def test_rejected_media_types(self, content_type):
        """Test everything else is refused"""
        with pytest.raises(InvalidFileType):
            validate_media_type(content_type)

    def test_unique_filename_keeps_extension(self):
        """Test generated names are distinct and keep the extension"""
        first = generate_unique_filename("cover.PNG")
        second = generate_unique_filename("cover.PNG")
        assert first.endswith(".png")
        assert first != second
        assert generate_unique_filename("noext").endswith(".bin")

    @pytest.mark.asyncio
    async def test_save_upload(self):
        """Test a stored file is reachable under the public prefix"""
        stored = await save_upload_file(make_upload(b"ID3audio", "demo.mp3", "audio/mpeg"))

        assert stored["size"] == 8
        assert stored["type"] == "audio/mpeg"
        assert stored["original_name"] == "demo.mp3"
        assert stored["url"] == f"{settings.UPLOAD_URL_PREFIX}/{stored['filename']}"
        assert (self.upload_dir / stored["filename"]).read_bytes() == b"ID3audio"

    @pytest.mark.asyncio
    async def test_too_large_file_removed(self, monkeypatch):
        """Test oversized uploads fail and leave nothing behind"""
        monkeypatch.setattr(settings, "MAX_FILE_SIZE", 4)
        with pytest.raises(FileTooLarge):
            await save_upload_file(make_upload(b"0123456789", "big.png", "image/png"))
        assert os.listdir(self.upload_dir) == []

    @pytest.mark.asyncio
    async def test_wrong_type_rejected(self):
        """Test non-media uploads are refused before writing"""
        with pytest.raises(InvalidFileType):
            await save_upload_file(make_upload(b"%PDF", "cv.pdf", "application/pdf"))
        assert os.listdir(self.upload_dir) == []

    @pytest.mark.asyncio
    async def test_missing_filename(self):
        """Test an upload without a name"""
        with pytest.raises(ValidationError):
            await save_upload_file(make_upload(b"x", "", "image/png"))

    def test_file_too_large_status(self):
        """Test size errors map to 413"""
        assert FileTooLarge.status_code == 413
        assert InvalidFileType.status_code == 422
