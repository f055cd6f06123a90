from datetime import datetime, date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, List
from pydantic import BaseModel, field_validator

from .attachment import AttachmentResponse


MAX_HOURS_WORKED = Decimal("1000")
HOURS_PRECISION = Decimal("0.01")


class ClaimCreate(BaseModel):
    lecturer_name: str
    claim_period: date
    hours_worked: Decimal
    hourly_rate: Decimal
    notes: Optional[str] = None

    @field_validator("lecturer_name")
    @classmethod
    def lecturer_name_valid(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("lecturer_name cannot be empty")
        v = v.strip()
        if len(v) > 200:
            raise ValueError("lecturer_name must be at most 200 characters")
        return v

    @field_validator("hours_worked")
    @classmethod
    def hours_in_range(cls, v: Decimal) -> Decimal:
        if v < 0 or v > MAX_HOURS_WORKED:
            raise ValueError("hours_worked must be between 0 and 1000")
        # Stored as Numeric(7, 2); rounding here would change which rules fire
        if v != v.quantize(HOURS_PRECISION):
            raise ValueError("hours_worked allows at most 2 decimal places")
        return v

    @field_validator("hourly_rate")
    @classmethod
    def rate_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("hourly_rate cannot be negative")
        return v.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class ApproveRequest(BaseModel):
    approved_by: str

    @field_validator("approved_by")
    @classmethod
    def approver_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("approved_by cannot be empty")
        return v.strip()


class RejectRequest(BaseModel):
    rejected_by: str
    reason: str

    @field_validator("rejected_by")
    @classmethod
    def rejecter_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("rejected_by cannot be empty")
        return v.strip()


class ClaimListResponse(BaseModel):
    id: int
    lecturer_name: str
    claim_period: date
    hours_worked: Decimal
    hourly_rate: Decimal
    amount: Decimal
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class ClaimResponse(ClaimListResponse):
    notes: Optional[str]
    attachments: List[AttachmentResponse] = []


class ClaimTransitionsResponse(BaseModel):
    claim_id: int
    current_status: str
    valid_transitions: List[str]
