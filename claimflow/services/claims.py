import logging
from datetime import datetime
from typing import FrozenSet, List, Optional

from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from ..config import Settings, get_settings
from ..errors import ClaimConflictError, ClaimNotFoundError
from ..models.attachment import Attachment
from ..models.claim import Claim, ClaimStatus, utcnow
from ..rules import SubmissionPolicy, evaluate_submission
from ..schemas.claim import ClaimCreate
from ..state_machine import ClaimAction, can_apply, get_valid_transitions
from ..storage.base import BlobStorageBase
from ..storage.local import LocalFileStorage
from .attachments import AttachmentPolicy, generate_storage_name, validate_attachment
from .audit import AuditService

logger = logging.getLogger(__name__)


class ClaimWorkflowService:
    """Owns claim status changes and the checks that run at submission.

    Every mutating operation reads the claim, decides, and commits once.
    Calls made from the wrong source status change nothing and raise nothing.
    """

    def __init__(
        self,
        storage: BlobStorageBase,
        submission_policy: Optional[SubmissionPolicy] = None,
        attachment_policy: Optional[AttachmentPolicy] = None,
    ):
        self.storage = storage
        self.submission_policy = submission_policy or SubmissionPolicy()
        self.attachment_policy = attachment_policy or AttachmentPolicy()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ClaimWorkflowService":
        settings = settings or get_settings()
        return cls(
            storage=LocalFileStorage(settings.upload_dir, settings.upload_url_prefix),
            submission_policy=SubmissionPolicy.from_settings(settings),
            attachment_policy=AttachmentPolicy.from_settings(settings),
        )

    def create_claim(self, db: Session, data: ClaimCreate) -> Claim:
        claim = Claim.new_draft(
            lecturer_name=data.lecturer_name,
            claim_period=data.claim_period,
            hours_worked=data.hours_worked,
            hourly_rate=data.hourly_rate,
            notes=data.notes,
        )
        db.add(claim)
        db.commit()
        db.refresh(claim)

        logger.info(f"Created claim {claim.id} for {claim.lecturer_name} in {claim.status}")
        return claim

    def add_attachment(
        self,
        db: Session,
        claim_id: int,
        file_name: Optional[str],
        content: Optional[bytes],
        uploaded_by: Optional[str] = None,
    ) -> Attachment:
        self._load_claim(db, claim_id)

        extension = validate_attachment(file_name, content, self.attachment_policy)
        storage_name = generate_storage_name(extension)
        file_path = self.storage.write_bytes(storage_name, content)

        attachment = Attachment(
            claim_id=claim_id,
            file_name=file_name,
            file_type=extension,
            file_size=len(content),
            file_path=file_path,
            uploaded_by=uploaded_by,
            uploaded_at=datetime.now(),
        )
        db.add(attachment)
        db.commit()
        db.refresh(attachment)

        logger.info(
            f"Attached {attachment.file_name} ({attachment.file_size} bytes) "
            f"to claim {claim_id} as {file_path}"
        )
        return attachment

    def submit_for_review(self, db: Session, claim_id: int) -> Claim:
        claim = self._load_claim(db, claim_id)

        if not self._applies(claim, ClaimAction.SUBMIT):
            return claim

        decision = evaluate_submission(
            hours_worked=claim.hours_worked,
            hourly_rate=claim.hourly_rate,
            policy=self.submission_policy,
        )

        if decision.rejected:
            AuditService.record(claim, [AuditService.auto_rejection(decision.message)])
            self._transition(claim, ClaimAction.SUBMIT, ClaimStatus.REJECTED)
            return self._commit(db, claim)

        if decision.flags:
            logger.info(
                f"Claim {claim_id} flagged for review: "
                f"{', '.join(code for code, _ in decision.flags)}"
            )
            AuditService.record(
                claim, [AuditService.system_flag(message) for message in decision.flag_messages]
            )

        self._transition(claim, ClaimAction.SUBMIT, ClaimStatus.PENDING)
        return self._commit(db, claim)

    def approve(self, db: Session, claim_id: int, approved_by: str) -> Claim:
        claim = self._load_claim(db, claim_id)

        if not self._applies(claim, ClaimAction.APPROVE):
            return claim

        self._transition(claim, ClaimAction.APPROVE, ClaimStatus.APPROVED)
        AuditService.record(claim, [AuditService.approval(approved_by)])
        return self._commit(db, claim)

    def reject(self, db: Session, claim_id: int, rejected_by: str, reason: str) -> Claim:
        claim = self._load_claim(db, claim_id)

        if not self._applies(claim, ClaimAction.REJECT):
            return claim

        self._transition(claim, ClaimAction.REJECT, ClaimStatus.REJECTED)
        AuditService.record(claim, [AuditService.rejection(rejected_by, reason)])
        return self._commit(db, claim)

    def get_claim(self, db: Session, claim_id: int) -> Optional[Claim]:
        return (
            db.query(Claim)
            .options(selectinload(Claim.attachments))
            .filter(Claim.id == claim_id)
            .first()
        )

    def list_claims_for_lecturer(self, db: Session, lecturer_name: str) -> List[Claim]:
        return (
            db.query(Claim)
            .filter(Claim.lecturer_name == lecturer_name)
            .order_by(Claim.created_at.desc(), Claim.id.desc())
            .all()
        )

    def list_pending_claims(self, db: Session) -> List[Claim]:
        return (
            db.query(Claim)
            .filter(Claim.status == ClaimStatus.PENDING.value)
            .order_by(Claim.claim_period.asc(), Claim.id.asc())
            .all()
        )

    def list_claims(self, db: Session) -> List[Claim]:
        return db.query(Claim).order_by(Claim.created_at.desc(), Claim.id.desc()).all()

    def list_attachments(self, db: Session, claim_id: int) -> List[Attachment]:
        return db.query(Attachment).filter(Attachment.claim_id == claim_id).all()

    @staticmethod
    def get_valid_transitions(claim: Claim) -> FrozenSet[ClaimStatus]:
        return get_valid_transitions(ClaimStatus(claim.status))

    def _load_claim(self, db: Session, claim_id: int) -> Claim:
        claim = db.query(Claim).filter(Claim.id == claim_id).first()
        if not claim:
            raise ClaimNotFoundError(claim_id)
        return claim

    @staticmethod
    def _applies(claim: Claim, action: ClaimAction) -> bool:
        if can_apply(action, ClaimStatus(claim.status)):
            return True
        logger.info(f"Claim {claim.id} is {claim.status}; {action.value.lower()} ignored")
        return False

    @staticmethod
    def _transition(claim: Claim, action: ClaimAction, target: ClaimStatus) -> None:
        current = claim.status
        claim.status = target.value
        logger.info(
            f"Claim {claim.id}: {action.value} {current} -> {target.value} at {utcnow().isoformat()}"
        )

    @staticmethod
    def _commit(db: Session, claim: Claim) -> Claim:
        claim_id = claim.id
        try:
            db.commit()
        except StaleDataError as e:
            db.rollback()
            logger.warning(f"Version conflict committing claim {claim_id}: {e}")
            raise ClaimConflictError(claim_id) from e
        db.refresh(claim)
        return claim
