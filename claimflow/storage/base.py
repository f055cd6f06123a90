from abc import ABC, abstractmethod


class BlobStorageBase(ABC):
    @abstractmethod
    def write_bytes(self, name: str, content: bytes) -> str:
        """Store ``content`` under ``name`` and return the stored path."""
        pass
