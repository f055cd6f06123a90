import logging
from typing import Dict

from .base import BlobStorageBase

logger = logging.getLogger(__name__)


class InMemoryStorage(BlobStorageBase):
    def __init__(self, url_prefix: str = "/uploads"):
        self.url_prefix = url_prefix.rstrip("/")
        self.blobs: Dict[str, bytes] = {}

    def write_bytes(self, name: str, content: bytes) -> str:
        self.blobs[name] = bytes(content)
        logger.debug(f"Kept {len(content)} bytes in memory as {name}")
        return f"{self.url_prefix}/{name}"
