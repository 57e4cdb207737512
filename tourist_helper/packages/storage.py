import logging
import os
import secrets
import shutil
import time
from pathlib import Path
from typing import Iterable, List, Optional

from fastapi import UploadFile

from tourist_helper.config import settings
from tourist_helper.exceptions import ValidationError

logger = logging.getLogger(__name__)

PACKAGE_IMAGE_URL_PREFIX = "/uploads/packages/"


class ImageStorage:
    """Package images on local disk, addressed by their public URL path"""

    def __init__(self, upload_dir: str, max_files: int = 10):
        self.package_dir = Path(upload_dir) / "packages"
        self.max_files = max_files

    def _unique_name(self, original_name: Optional[str]) -> str:
        ext = os.path.splitext(original_name or "")[1].lower()
        return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"

    def path_for(self, url_path: str) -> Optional[Path]:
        """Map a stored `/uploads/packages/<name>` path back to a file on disk"""
        if not url_path or not url_path.startswith(PACKAGE_IMAGE_URL_PREFIX):
            return None
        name = os.path.basename(url_path)
        if not name:
            return None
        return self.package_dir / name

    def save_all(self, files: Iterable[UploadFile]) -> List[str]:
        uploads = [f for f in files if f is not None and f.filename]
        if len(uploads) > self.max_files:
            raise ValidationError(f"At most {self.max_files} images are allowed")
        for upload in uploads:
            if upload.content_type and not upload.content_type.startswith("image/"):
                raise ValidationError(f"{upload.filename} is not an image")

        self.package_dir.mkdir(parents=True, exist_ok=True)
        saved = []
        try:
            for upload in uploads:
                name = self._unique_name(upload.filename)
                with open(self.package_dir / name, "wb") as out:
                    shutil.copyfileobj(upload.file, out)
                saved.append(PACKAGE_IMAGE_URL_PREFIX + name)
        except OSError:
            self.delete_all(saved)
            raise
        return saved

    def delete_all(self, url_paths: Iterable[str]) -> int:
        """Remove image files; failures are logged and skipped"""
        removed = 0
        for url_path in url_paths:
            file_path = self.path_for(url_path)
            if file_path is None:
                logger.warning("Ignoring image outside the package upload dir: %s", url_path)
                continue
            try:
                file_path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.error("Failed to delete image %s: %s", url_path, e)
        return removed


def get_image_storage() -> ImageStorage:
    return ImageStorage(settings.UPLOAD_DIR, max_files=settings.MAX_PACKAGE_IMAGES)
