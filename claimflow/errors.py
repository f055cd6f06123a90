class ClaimWorkflowError(Exception):
    pass


class ClaimNotFoundError(ClaimWorkflowError):
    def __init__(self, claim_id: int):
        self.claim_id = claim_id
        super().__init__(f"Claim with ID {claim_id} not found.")


class ClaimConflictError(ClaimWorkflowError):
    """Claim row was changed by another transaction since it was read."""

    def __init__(self, claim_id: int):
        self.claim_id = claim_id
        super().__init__(
            f"Claim {claim_id} was modified by another transaction; reload and retry."
        )


class AttachmentError(ClaimWorkflowError):
    pass


class InvalidAttachmentError(AttachmentError):
    pass


class UnsupportedAttachmentTypeError(AttachmentError):
    def __init__(self, extension: str, allowed: frozenset):
        self.extension = extension
        self.allowed = allowed
        allowed_list = ", ".join(sorted(ext.upper() for ext in allowed))
        super().__init__(f"Unsupported file type '{extension or 'none'}'. Allowed: {allowed_list}")


class AttachmentTooLargeError(AttachmentError):
    def __init__(self, size: int, max_bytes: int):
        self.size = size
        self.max_bytes = max_bytes
        super().__init__(
            f"File too large ({size} bytes). Max size is {max_bytes // (1024 * 1024)}MB."
        )
