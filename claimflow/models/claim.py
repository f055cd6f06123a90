from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String, Text, Index
from sqlalchemy.orm import relationship

from ..database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ClaimStatus(str, Enum):
    DRAFT = "Draft"
    PENDING = "Pending"
    # Declared for the payment side of the process; nothing moves a claim here yet
    VERIFIED = "Verified"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    SETTLED = "Settled"


class Claim(Base):
    __tablename__ = "claims"

    id = Column(Integer, primary_key=True, index=True)

    lecturer_name = Column(String(200), nullable=False, index=True)
    claim_period = Column(Date, nullable=False)
    hours_worked = Column(Numeric(7, 2), nullable=False)
    hourly_rate = Column(Numeric(18, 2), nullable=False)

    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=ClaimStatus.DRAFT.value)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Row version checked by SQLAlchemy on every UPDATE
    version_id = Column(Integer, nullable=False)

    attachments = relationship(
        "Attachment",
        back_populates="claim",
        cascade="all, delete-orphan",
        order_by="Attachment.id",
    )

    __mapper_args__ = {"version_id_col": version_id}

    __table_args__ = (
        Index("idx_claims_status_period", "status", "claim_period"),
    )

    @property
    def amount(self) -> Decimal:
        return Decimal(self.hours_worked or 0) * Decimal(self.hourly_rate or 0)

    @classmethod
    def new_draft(
        cls,
        lecturer_name: str,
        claim_period: date,
        hours_worked: Decimal,
        hourly_rate: Decimal,
        notes: Optional[str] = None,
    ) -> "Claim":
        return cls(
            lecturer_name=lecturer_name,
            claim_period=claim_period,
            hours_worked=hours_worked,
            hourly_rate=hourly_rate,
            notes=notes,
            status=ClaimStatus.DRAFT.value,
            created_at=utcnow(),
        )
