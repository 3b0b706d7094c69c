import os
import random
import time
from pathlib import Path
from typing import Optional
from fastapi import UploadFile
import logging

from config import settings
from core.exceptions import PayloadTooLarge, ValidationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class MediaHandler:
    """
    Stores uploaded videos, thumbnails and avatars under the upload root.
    """

    # Upload field -> (sub directory, accepted MIME prefix)
    FIELDS = {
        'video': ('videos', 'video/'),
        'thumbnail': ('thumbnails', 'image/'),
        'avatar': ('avatars', 'image/'),
    }

    def __init__(self, base_upload_dir: Optional[str] = None, max_size: Optional[int] = None):
        """
        Initialize the media handler.

        Args:
            base_upload_dir: Base directory for uploads (e.g., 'uploads')
            max_size: Maximum accepted file size in bytes
        """
        self.base_upload_dir = Path(base_upload_dir or settings.UPLOAD_ROOT)
        self.max_size = max_size or settings.MAX_UPLOAD_SIZE
        self.ensure_directories()

    def ensure_directories(self):
        """Ensure all required directories exist."""
        for subdir, _ in self.FIELDS.values():
            (self.base_upload_dir / subdir).mkdir(parents=True, exist_ok=True)

    def validate(self, file: UploadFile, field: str) -> None:
        subdir, mime_prefix = self.FIELDS[field]
        content_type = file.content_type or ''
        if not content_type.startswith(mime_prefix):
            kind = 'video' if mime_prefix == 'video/' else 'image'
            raise ValidationError(f"Only {kind} files are allowed!")

    async def save(self, file: UploadFile, field: str) -> str:
        """
        Save an uploaded file and return its public URL.

        Args:
            file: The uploaded file
            field: Upload field name ('video', 'thumbnail' or 'avatar')

        Returns:
            URL of the stored file, e.g. ``/uploads/videos/video-1700000000000-123.mp4``
        """
        if field not in self.FIELDS:
            raise ValidationError("Unexpected field")
        self.validate(file, field)

        subdir, _ = self.FIELDS[field]
        unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10 ** 9)}"
        filename = f"{field}-{unique_suffix}{Path(file.filename or '').suffix.lower()}"
        file_path = self.base_upload_dir / subdir / filename

        written = 0
        try:
            with open(file_path, 'wb') as buffer:
                while True:
                    chunk = await file.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_size:
                        raise PayloadTooLarge(
                            f"File too large. Max size: {self.max_size // (1024 * 1024)}MB"
                        )
                    buffer.write(chunk)
        except Exception:
            if file_path.exists():
                file_path.unlink()
            raise

        logger.info(f"Stored {field} upload {filename} ({written} bytes)")
        return f"/uploads/{subdir}/{filename}"

    def remove(self, url: Optional[str]) -> None:
        """Delete a stored file given the URL returned by ``save``."""
        if not url or not url.startswith('/uploads/'):
            return
        path = self.base_upload_dir / url[len('/uploads/'):]
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
