from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class AttachmentResponse(BaseModel):
    id: int
    claim_id: int
    file_name: str
    file_type: str
    file_size: int
    file_path: str
    uploaded_at: datetime
    uploaded_by: Optional[str]

    class Config:
        from_attributes = True
