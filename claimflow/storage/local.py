import logging
import os

from .base import BlobStorageBase

logger = logging.getLogger(__name__)


class LocalFileStorage(BlobStorageBase):
    def __init__(self, root_dir: str, url_prefix: str = "/uploads"):
        self.root_dir = root_dir
        self.url_prefix = url_prefix.rstrip("/")

    def write_bytes(self, name: str, content: bytes) -> str:
        os.makedirs(self.root_dir, exist_ok=True)

        storage_path = os.path.join(self.root_dir, name)
        with open(storage_path, "wb") as f:
            f.write(content)

        logger.info(f"Stored {len(content)} bytes at {storage_path}")
        return f"{self.url_prefix}/{name}"
