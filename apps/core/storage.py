import logging
import shutil
import time
from pathlib import Path
from typing import BinaryIO, Optional

from config import settings

logger = logging.getLogger(__name__)

class StorageService:
    """
    Object storage bucket. Files live under STORAGE_ROOT/<bucket>/<path>
    and are served by the static mount at STORAGE_URL.
    """

    def __init__(self, root: Optional[str] = None, bucket: Optional[str] = None, base_url: Optional[str] = None):
        self.root = Path(root or settings.STORAGE_ROOT)
        self.bucket = bucket or settings.STORAGE_BUCKET
        self.base_url = (base_url or settings.STORAGE_URL).rstrip("/")

    @staticmethod
    def object_path(folder: str, filename: str) -> str:
        """Builds `<folder>/<ms timestamp>-<filename>`."""
        name = Path(filename or "upload").name.replace(" ", "_")
        return f"{folder}/{int(time.time() * 1000)}-{name}"

    def upload(self, path: str, file: BinaryIO) -> str:
        destination = self.root / self.bucket / path
        destination.parent.mkdir(parents=True, exist_ok=True)

        with open(destination, "wb") as buffer:
            shutil.copyfileobj(file, buffer)

        logger.info("Stored object %s/%s", self.bucket, path)
        return path

    def get_public_url(self, path: str) -> str:
        return f"{self.base_url}/{self.bucket}/{path}"

    def upload_file(self, folder: str, filename: str, file: BinaryIO) -> str:
        """Uploads under a fresh object path and returns its public URL."""
        path = self.upload(self.object_path(folder, filename), file)
        return self.get_public_url(path)
