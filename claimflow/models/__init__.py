from .claim import Claim, ClaimStatus
from .attachment import Attachment

__all__ = [
    "Claim",
    "ClaimStatus",
    "Attachment",
]
