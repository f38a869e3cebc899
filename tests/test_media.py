"""Tests for the media service against a mocked Cloudinary SDK."""

import io
from pathlib import Path
from unittest.mock import patch

import pytest
from cloudinary.exceptions import Error as CloudinaryError
from fastapi import UploadFile

from app.config import Settings
from app.errors import UploadError, ValidationError
from app.services.media import AVATAR_OPTIONS, LECTURE_EXTENSIONS, MediaService


@pytest.fixture(name="media_settings")
def media_settings_fixture(tmp_path: Path) -> Settings:
    settings = Settings()
    settings.UPLOAD_DIR = str(tmp_path / "uploads")
    settings.CLOUDINARY_CLOUD_NAME = "demo"
    settings.CLOUDINARY_API_KEY = "key123"
    settings.CLOUDINARY_API_SECRET = "secret456"
    settings.MAX_UPLOAD_SIZE_MB = 1
    return settings


def _local_file(tmp_path: Path, name: str = "avatar.png") -> Path:
    path = tmp_path / name
    path.write_bytes(b"\x89PNG" + b"\x00" * 16)
    return path


class TestUpload:
    @patch("app.services.media.cloudinary.uploader.upload")
    def test_upload_success(self, mock_upload, media_settings: Settings, tmp_path: Path):
        mock_upload.return_value = {"public_id": "lms/abc", "secure_url": "https://res.cloudinary.com/demo/lms/abc.png"}
        path = _local_file(tmp_path)

        result = MediaService(media_settings).upload(path, **AVATAR_OPTIONS)

        assert result.public_id == "lms/abc"
        assert result.secure_url.startswith("https://res.cloudinary.com/")
        assert mock_upload.call_args.args == (str(path),)
        options = mock_upload.call_args.kwargs
        assert options["folder"] == "lms"
        assert (options["width"], options["height"], options["gravity"], options["crop"]) == (250, 250, "faces", "fill")
        assert options["resource_type"] == "image"
        assert options["cloud_name"] == "demo"
        assert options["api_key"] == "key123"
        assert options["api_secret"] == "secret456"
        assert not path.exists()

    @patch("app.services.media.cloudinary.uploader.upload")
    def test_upload_without_transformation(self, mock_upload, media_settings: Settings, tmp_path: Path):
        mock_upload.return_value = {"public_id": "lms/lec", "secure_url": "https://res.cloudinary.com/demo/lms/lec.mp4"}

        MediaService(media_settings).upload(_local_file(tmp_path, "lecture.mp4"), resource_type="auto")

        options = mock_upload.call_args.kwargs
        assert options["resource_type"] == "auto"
        assert "crop" not in options
        assert "width" not in options

    @patch("app.services.media.cloudinary.uploader.upload")
    def test_upload_error_response(self, mock_upload, media_settings: Settings, tmp_path: Path):
        mock_upload.side_effect = CloudinaryError("Invalid image file")
        path = _local_file(tmp_path)

        with pytest.raises(UploadError, match="Invalid image file"):
            MediaService(media_settings).upload(path)
        assert not path.exists()

    @patch("app.services.media.cloudinary.uploader.upload")
    def test_upload_incomplete_response(self, mock_upload, media_settings: Settings, tmp_path: Path):
        mock_upload.return_value = {"public_id": "lms/abc"}
        path = _local_file(tmp_path)

        with pytest.raises(UploadError, match="incomplete"):
            MediaService(media_settings).upload(path)
        assert not path.exists()

    @patch("app.services.media.cloudinary.uploader.upload")
    def test_upload_not_configured(self, mock_upload, media_settings: Settings, tmp_path: Path):
        media_settings.CLOUDINARY_API_SECRET = ""
        path = _local_file(tmp_path)

        with pytest.raises(UploadError, match="not configured"):
            MediaService(media_settings).upload(path)
        mock_upload.assert_not_called()
        assert not path.exists()

    @patch("app.services.media.cloudinary.uploader.destroy")
    def test_destroy(self, mock_destroy, media_settings: Settings):
        mock_destroy.return_value = {"result": "ok"}

        MediaService(media_settings).destroy("lms/abc")

        assert mock_destroy.call_args.args == ("lms/abc",)
        assert mock_destroy.call_args.kwargs["resource_type"] == "image"
        assert mock_destroy.call_args.kwargs["cloud_name"] == "demo"

    @patch("app.services.media.cloudinary.uploader.destroy")
    def test_destroy_failure(self, mock_destroy, media_settings: Settings):
        mock_destroy.side_effect = CloudinaryError("Server error")
        with pytest.raises(UploadError):
            MediaService(media_settings).destroy("lms/abc")


class TestStoreFile:
    def test_store_file(self, media_settings: Settings):
        service = MediaService(media_settings)
        upload = UploadFile(file=io.BytesIO(b"\x00" * 100), filename="me.PNG")
        path = service.store_file(upload)
        assert path.exists()
        assert path.suffix == ".png"
        assert path.stat().st_size == 100
        assert path.parent == Path(media_settings.UPLOAD_DIR)

    def test_store_file_rejects_extension(self, media_settings: Settings):
        service = MediaService(media_settings)
        upload = UploadFile(file=io.BytesIO(b"\x00" * 100), filename="movie.mp4")
        with pytest.raises(ValidationError, match="Unsupported file type"):
            service.store_file(upload)
        assert service.store_file(UploadFile(file=io.BytesIO(b"\x00"), filename="movie.mp4"), LECTURE_EXTENSIONS).exists()

    def test_store_file_too_large(self, media_settings: Settings):
        service = MediaService(media_settings)
        upload = UploadFile(file=io.BytesIO(b"\x00" * (1024 * 1024 + 1)), filename="big.png")
        with pytest.raises(ValidationError, match="File too large"):
            service.store_file(upload)
        assert list(Path(media_settings.UPLOAD_DIR).iterdir()) == []

    def test_remove_missing_file_is_quiet(self, media_settings: Settings, tmp_path: Path):
        MediaService(media_settings).remove_local_file(tmp_path / "missing.png")
