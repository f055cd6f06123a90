from .claims import ClaimWorkflowService
from .audit import AuditService, AuditEntry, AuditKind
from .attachments import AttachmentPolicy

__all__ = ["ClaimWorkflowService", "AuditService", "AuditEntry", "AuditKind", "AttachmentPolicy"]
