import os
import uuid
from dataclasses import dataclass
from typing import FrozenSet, Optional

from ..config import Settings
from ..errors import (
    AttachmentTooLargeError,
    InvalidAttachmentError,
    UnsupportedAttachmentTypeError,
)


@dataclass(frozen=True)
class AttachmentPolicy:
    allowed_extensions: FrozenSet[str] = frozenset({"pdf", "docx", "xlsx"})
    max_bytes: int = 5 * 1024 * 1024

    @classmethod
    def from_settings(cls, settings: Settings) -> "AttachmentPolicy":
        return cls(
            allowed_extensions=frozenset(
                ext.lower().lstrip(".") for ext in settings.allowed_attachment_extensions
            ),
            max_bytes=settings.max_attachment_bytes,
        )


def file_extension(file_name: Optional[str]) -> str:
    """Lower-cased extension of ``file_name`` without the leading dot."""
    if not file_name:
        return ""
    return os.path.splitext(file_name)[1].lower().lstrip(".")


def validate_attachment(file_name: Optional[str], content: Optional[bytes], policy: AttachmentPolicy) -> str:
    if content is None or len(content) == 0:
        raise InvalidAttachmentError("Invalid file upload: file is missing or empty.")

    extension = file_extension(file_name)
    if extension not in policy.allowed_extensions:
        raise UnsupportedAttachmentTypeError(extension, policy.allowed_extensions)

    if len(content) > policy.max_bytes:
        raise AttachmentTooLargeError(len(content), policy.max_bytes)

    return extension


def generate_storage_name(extension: str) -> str:
    return f"{uuid.uuid4().hex}.{extension}" if extension else uuid.uuid4().hex
