"""Audit trail for claim decisions.

Decisions are described as structured ``AuditEntry`` values and rendered
into the claim's free-text ``notes``, which stays the only persisted form.
Each entry is also written to the application log.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence

from ..models.claim import Claim, utcnow

logger = logging.getLogger(__name__)

AUTOMATION_REPORT_HEADER = "-- Automation Report --"
SYSTEM_ACTOR = "system"


class AuditKind(str, Enum):
    AUTO_REJECTION = "AUTO_REJECTION"
    SYSTEM_FLAG = "SYSTEM_FLAG"
    APPROVAL = "APPROVAL"
    REJECTION = "REJECTION"


def format_timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S UTC")


@dataclass(frozen=True)
class AuditEntry:
    kind: AuditKind
    message: str
    actor: str = SYSTEM_ACTOR
    timestamp: datetime = field(default_factory=utcnow)
    reason: Optional[str] = None

    def render(self) -> str:
        if self.kind == AuditKind.APPROVAL:
            return f"Approved by {self.actor} on {format_timestamp(self.timestamp)}"
        if self.kind == AuditKind.REJECTION:
            return (
                f"Rejected by {self.actor} with reason: '{self.reason}' "
                f"on {format_timestamp(self.timestamp)}"
            )
        return self.message


def render_entries(entries: Sequence[AuditEntry]) -> List[str]:
    """Render entries as note lines, grouping system flags under one report header."""
    lines: List[str] = []
    header_written = False
    for entry in entries:
        if entry.kind == AuditKind.SYSTEM_FLAG and not header_written:
            lines.append(AUTOMATION_REPORT_HEADER)
            header_written = True
        lines.append(entry.render())
    return lines


def append_note_lines(notes: Optional[str], lines: Sequence[str]) -> Optional[str]:
    if not lines:
        return notes
    block = "\n".join(lines)
    if not notes:
        return block
    return f"{notes}\n{block}"


class AuditService:
    @staticmethod
    def record(claim: Claim, entries: Sequence[AuditEntry]) -> List[AuditEntry]:
        claim.notes = append_note_lines(claim.notes, render_entries(entries))
        for entry in entries:
            logger.info(
                "[audit] claim_id=%s kind=%s actor=%s message=%s",
                claim.id, entry.kind.value, entry.actor, entry.render(),
            )
        return list(entries)

    @staticmethod
    def auto_rejection(message: str) -> AuditEntry:
        return AuditEntry(kind=AuditKind.AUTO_REJECTION, message=message)

    @staticmethod
    def system_flag(message: str) -> AuditEntry:
        return AuditEntry(kind=AuditKind.SYSTEM_FLAG, message=message)

    @staticmethod
    def approval(approved_by: str) -> AuditEntry:
        return AuditEntry(kind=AuditKind.APPROVAL, message="Approved", actor=approved_by)

    @staticmethod
    def rejection(rejected_by: str, reason: str) -> AuditEntry:
        return AuditEntry(
            kind=AuditKind.REJECTION,
            message="Rejected",
            actor=rejected_by,
            reason=reason,
        )
