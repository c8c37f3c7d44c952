import logging
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import cloudinary
import cloudinary.uploader

from app.core.config import settings

logger = logging.getLogger(__name__)


class MediaStorage(ABC):
    """Binary-object store: accepts bytes, returns a retrievable locator."""

    @abstractmethod
    def upload_image(self, file: bytes, filename: Optional[str] = None) -> str:
        ...

    @abstractmethod
    def upload_video(self, file: bytes, filename: Optional[str] = None) -> str:
        ...


class CloudinaryMediaStorage(MediaStorage):

    def __init__(self):
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True,
        )

    def upload_image(self, file: bytes, filename: Optional[str] = None) -> str:
        result = cloudinary.uploader.upload(file, resource_type="image", folder=settings.CLOUDINARY_FOLDER)
        logger.info(f"Uploaded image to Cloudinary: {result.get('public_id')}")
        return result["secure_url"]

    def upload_video(self, file: bytes, filename: Optional[str] = None) -> str:
        result = cloudinary.uploader.upload(file, resource_type="video", folder=settings.CLOUDINARY_FOLDER)
        logger.info(f"Uploaded video to Cloudinary: {result.get('public_id')}")
        return result["secure_url"]


class LocalMediaStorage(MediaStorage):
    """Writes uploads under UPLOAD_DIR; files are served from /uploads."""

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or settings.UPLOAD_DIR)

    def _save(self, subdir: str, file: bytes, filename: Optional[str]) -> str:
        extension = os.path.splitext(filename or "")[1].lower()
        name = f"{uuid.uuid4().hex}{extension}"
        target_dir = self.root / subdir
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / name).write_bytes(file)
        return f"/uploads/{subdir}/{name}"

    def upload_image(self, file: bytes, filename: Optional[str] = None) -> str:
        return self._save("images", file, filename)

    def upload_video(self, file: bytes, filename: Optional[str] = None) -> str:
        return self._save("videos", file, filename)


def build_media_storage() -> MediaStorage:
    if settings.cloudinary_enabled:
        return CloudinaryMediaStorage()
    return LocalMediaStorage()
