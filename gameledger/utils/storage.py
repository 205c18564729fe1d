# gameledger/utils/storage.py
import logging
import time
import uuid
from pathlib import Path
from typing import Optional

from gameledger.core.config import settings

logger = logging.getLogger(__name__)

AVATAR_BUCKET = "avatars"
ALLOWED_AVATAR_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


class StorageError(Exception):
    """Upload rejected before anything was written."""


class FileTooLarge(StorageError):
    pass


class BucketStorage:
    """A public bucket: files under MEDIA_ROOT/<bucket>, served at MEDIA_URL/<bucket>."""

    def __init__(self, bucket: str, root: Optional[str] = None, base_url: Optional[str] = None):
        self.bucket = bucket
        self.directory = Path(root or settings.MEDIA_ROOT) / bucket
        self.base_url = (base_url if base_url is not None else settings.MEDIA_URL).rstrip("/")

    def public_url(self, filename: str) -> str:
        return f"{self.base_url}/{self.bucket}/{filename}"

    def filename_from_url(self, url: Optional[str]) -> Optional[str]:
        """Name of the stored file a public URL points at, if it is in this bucket."""
        prefix = f"{self.base_url}/{self.bucket}/"
        if not url or not url.startswith(prefix):
            return None
        name = url[len(prefix):]
        # Never follow a URL out of the bucket directory
        if not name or "/" in name or name in (".", ".."):
            return None
        return name

    def save(self, filename: str, data: bytes) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(self.directory / filename, "wb") as f:
            f.write(data)
        logger.info(f"📁 Stored {self.bucket}/{filename} ({len(data)} bytes)")
        return self.public_url(filename)

    def remove(self, filename: str) -> bool:
        path = self.directory / filename
        if not path.exists():
            return False
        path.unlink()
        logger.info(f"🗑️ Removed {self.bucket}/{filename}")
        return True


class AvatarStorage(BucketStorage):
    def __init__(self, root: Optional[str] = None, base_url: Optional[str] = None, max_bytes: Optional[int] = None):
        super().__init__(AVATAR_BUCKET, root=root, base_url=base_url)
        self.max_bytes = max_bytes or settings.MAX_AVATAR_BYTES

    def validate(self, content_type: Optional[str], data: bytes) -> str:
        """Returns the file extension for an acceptable image."""
        ext = ALLOWED_AVATAR_TYPES.get((content_type or "").lower())
        if ext is None:
            raise StorageError("Only JPEG, PNG, GIF and WEBP images are allowed")
        if len(data) == 0:
            raise StorageError("Empty file")
        if len(data) > self.max_bytes:
            raise FileTooLarge(f"File too large (max {self.max_bytes // (1024 * 1024)}MB)")
        return ext

    def upload(self, profile_id: uuid.UUID, content_type: Optional[str], data: bytes) -> str:
        """Store a new avatar and return its public URL.

        The previous avatar is left in place; callers delete it once the new
        URL has been committed.
        """
        ext = self.validate(content_type, data)
        filename = f"{profile_id}-{int(time.time() * 1000)}.{ext}"
        return self.save(filename, data)

    def delete(self, current_url: Optional[str]) -> bool:
        name = self.filename_from_url(current_url)
        if name is None:
            return False
        return self.remove(name)
