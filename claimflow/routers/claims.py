from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import (
    AttachmentTooLargeError,
    ClaimConflictError,
    ClaimNotFoundError,
    InvalidAttachmentError,
    UnsupportedAttachmentTypeError,
)
from ..schemas.attachment import AttachmentResponse
from ..schemas.claim import (
    ApproveRequest,
    ClaimCreate,
    ClaimListResponse,
    ClaimResponse,
    ClaimTransitionsResponse,
    RejectRequest,
)
from ..services.claims import ClaimWorkflowService

router = APIRouter(prefix="/api/claims", tags=["claims"])


def get_workflow_service() -> ClaimWorkflowService:
    return ClaimWorkflowService.from_settings()


def _not_found(e: ClaimNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _conflict(e: ClaimConflictError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post("", response_model=ClaimResponse, status_code=status.HTTP_201_CREATED)
def create_claim(
    claim_data: ClaimCreate,
    db: Session = Depends(get_db),
    service: ClaimWorkflowService = Depends(get_workflow_service),
):
    return service.create_claim(db, claim_data)


@router.get("", response_model=List[ClaimListResponse])
def list_claims(
    lecturer: Optional[str] = Query(None, description="Filter by exact lecturer name"),
    db: Session = Depends(get_db),
    service: ClaimWorkflowService = Depends(get_workflow_service),
):
    if lecturer is not None:
        return service.list_claims_for_lecturer(db, lecturer)
    return service.list_claims(db)


@router.get("/pending", response_model=List[ClaimListResponse])
def list_pending_claims(
    db: Session = Depends(get_db),
    service: ClaimWorkflowService = Depends(get_workflow_service),
):
    return service.list_pending_claims(db)


@router.get("/{claim_id}", response_model=ClaimResponse)
def get_claim(
    claim_id: int,
    db: Session = Depends(get_db),
    service: ClaimWorkflowService = Depends(get_workflow_service),
):
    claim = service.get_claim(db, claim_id)
    if not claim:
        raise HTTPException(status_code=404, detail="Claim not found")
    return claim


@router.post("/{claim_id}/submit", response_model=ClaimResponse)
def submit_claim(
    claim_id: int,
    db: Session = Depends(get_db),
    service: ClaimWorkflowService = Depends(get_workflow_service),
):
    try:
        return service.submit_for_review(db, claim_id)
    except ClaimNotFoundError as e:
        raise _not_found(e)
    except ClaimConflictError as e:
        raise _conflict(e)


@router.post("/{claim_id}/approve", response_model=ClaimResponse)
def approve_claim(
    claim_id: int,
    approve_data: ApproveRequest,
    db: Session = Depends(get_db),
    service: ClaimWorkflowService = Depends(get_workflow_service),
):
    try:
        return service.approve(db, claim_id, approve_data.approved_by)
    except ClaimNotFoundError as e:
        raise _not_found(e)
    except ClaimConflictError as e:
        raise _conflict(e)


@router.post("/{claim_id}/reject", response_model=ClaimResponse)
def reject_claim(
    claim_id: int,
    reject_data: RejectRequest,
    db: Session = Depends(get_db),
    service: ClaimWorkflowService = Depends(get_workflow_service),
):
    try:
        return service.reject(db, claim_id, reject_data.rejected_by, reject_data.reason)
    except ClaimNotFoundError as e:
        raise _not_found(e)
    except ClaimConflictError as e:
        raise _conflict(e)


@router.post(
    "/{claim_id}/attachments",
    response_model=AttachmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_attachment(
    claim_id: int,
    file: UploadFile = File(...),
    uploaded_by: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    service: ClaimWorkflowService = Depends(get_workflow_service),
):
    content = await file.read()
    try:
        return service.add_attachment(db, claim_id, file.filename, content, uploaded_by)
    except ClaimNotFoundError as e:
        raise _not_found(e)
    except InvalidAttachmentError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except UnsupportedAttachmentTypeError as e:
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(e))
    except AttachmentTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))


@router.get("/{claim_id}/attachments", response_model=List[AttachmentResponse])
def list_claim_attachments(
    claim_id: int,
    db: Session = Depends(get_db),
    service: ClaimWorkflowService = Depends(get_workflow_service),
):
    return service.list_attachments(db, claim_id)


@router.get("/{claim_id}/transitions", response_model=ClaimTransitionsResponse)
def get_claim_transitions(
    claim_id: int,
    db: Session = Depends(get_db),
    service: ClaimWorkflowService = Depends(get_workflow_service),
):
    claim = service.get_claim(db, claim_id)
    if not claim:
        raise HTTPException(status_code=404, detail="Claim not found")

    valid = service.get_valid_transitions(claim)
    return {
        "claim_id": claim.id,
        "current_status": claim.status,
        "valid_transitions": sorted(s.value for s in valid),
    }
