from .base import BlobStorageBase
from .local import LocalFileStorage
from .memory import InMemoryStorage

__all__ = [
    "BlobStorageBase",
    "LocalFileStorage",
    "InMemoryStorage",
]
