from .claim import (
    ClaimCreate,
    ClaimResponse,
    ClaimListResponse,
    ClaimTransitionsResponse,
    ApproveRequest,
    RejectRequest,
)
from .attachment import AttachmentResponse

__all__ = [
    "ClaimCreate",
    "ClaimResponse",
    "ClaimListResponse",
    "ClaimTransitionsResponse",
    "ApproveRequest",
    "RejectRequest",
    "AttachmentResponse",
]
