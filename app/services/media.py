"""Media storage: local staging of uploaded files and upload to Cloudinary."""

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import cloudinary.exceptions
import cloudinary.uploader
from fastapi import UploadFile

from app.config import Settings, get_settings
from app.errors import UploadError, ValidationError

logger = logging.getLogger("lms")

MEDIA_FOLDER = "lms"

# Square face-centred crop used for profile pictures.
AVATAR_OPTIONS: dict[str, Any] = {"folder": MEDIA_FOLDER, "width": 250, "height": 250, "gravity": "faces", "crop": "fill"}

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
LECTURE_EXTENSIONS = IMAGE_EXTENSIONS | {".mp4", ".mov", ".webm", ".mkv", ".pdf"}


@dataclass
class UploadResult:
    """Where an uploaded asset ended up."""

    public_id: str
    secure_url: str


class MediaService:
    """Stages uploaded files on disk and pushes them to Cloudinary."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def _credentials(self) -> dict[str, Any]:
        if not self.settings.media_configured:
            raise UploadError("Media storage is not configured")
        return {
            "cloud_name": self.settings.CLOUDINARY_CLOUD_NAME,
            "api_key": self.settings.CLOUDINARY_API_KEY,
            "api_secret": self.settings.CLOUDINARY_API_SECRET,
            "timeout": self.settings.MEDIA_REQUEST_TIMEOUT_SEC,
        }

    def store_file(self, upload: UploadFile, allowed_extensions: set[str] = IMAGE_EXTENSIONS) -> Path:
        """Stream an uploaded file into UPLOAD_DIR. Returns the local path.

        Raises ValidationError for an unsupported extension or an oversized file.
        """
        max_bytes = self.settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
        ext = Path(upload.filename or "").suffix.lower()
        if ext not in allowed_extensions:
            raise ValidationError(f"Unsupported file type '{ext}'. Allowed: {', '.join(sorted(allowed_extensions))}")

        upload_dir = Path(self.settings.UPLOAD_DIR)
        upload_dir.mkdir(parents=True, exist_ok=True)
        file_path = upload_dir / f"{uuid.uuid4()}{ext}"
        file_size = 0
        chunk_size = 1024 * 64

        try:
            with open(file_path, "wb") as f:
                while True:
                    chunk = upload.file.read(chunk_size)
                    if not chunk:
                        break
                    file_size += len(chunk)
                    if file_size > max_bytes:
                        raise ValidationError(
                            f"File too large ({file_size // (1024 * 1024)}MB). Maximum: {self.settings.MAX_UPLOAD_SIZE_MB}MB"
                        )
                    f.write(chunk)
        except ValidationError:
            self.remove_local_file(file_path)
            raise

        return file_path

    def upload(
        self,
        local_path: str | Path,
        folder: str = MEDIA_FOLDER,
        width: int | None = None,
        height: int | None = None,
        gravity: str | None = None,
        crop: str | None = None,
        resource_type: str = "image",
    ) -> UploadResult:
        """Upload a local file. The local file is removed afterwards whatever the outcome."""
        local_path = Path(local_path)
        options: dict[str, Any] = {"folder": folder, "resource_type": resource_type}
        for key, value in (("width", width), ("height", height), ("gravity", gravity), ("crop", crop)):
            if value:
                options[key] = value
        try:
            return self._upload(local_path, options)
        finally:
            self.remove_local_file(local_path)

    def _upload(self, local_path: Path, options: dict[str, Any]) -> UploadResult:
        credentials = self._credentials()
        try:
            body = cloudinary.uploader.upload(str(local_path), **options, **credentials)
        except (cloudinary.exceptions.Error, OSError) as e:
            raise UploadError(f"File not uploaded, please try again ({e})") from e

        try:
            result = UploadResult(public_id=body["public_id"], secure_url=body["secure_url"])
        except (KeyError, TypeError) as e:
            raise UploadError("Media storage returned an incomplete response") from e
        logger.info("Uploaded %s to media storage as %s", local_path.name, result.public_id)
        return result

    def destroy(self, public_id: str, resource_type: str = "image") -> None:
        """Delete an asset from media storage. Raises UploadError on failure."""
        credentials = self._credentials()
        try:
            body = cloudinary.uploader.destroy(public_id, resource_type=resource_type, **credentials)
        except (cloudinary.exceptions.Error, OSError) as e:
            raise UploadError(f"Failed to delete media asset ({e})") from e
        if body.get("result") != "ok":
            logger.warning("Media asset %s not deleted: %s", public_id, body.get("result"))

    def remove_local_file(self, path: str | Path) -> None:
        """Delete a staged file. Failures are logged, never raised."""
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove temp file %s: %s", path, e)


_media_service: MediaService | None = None


def get_media_service() -> MediaService:
    """Get singleton media service instance."""
    global _media_service
    if _media_service is None:
        _media_service = MediaService()
    return _media_service
