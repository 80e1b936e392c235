from pydantic import BaseModel
from typing import Optional, Any, Dict
from datetime import datetime

from supplyvault.schemas.verification import VerificationResult


class CertificationResponse(BaseModel):
    id: int
    supplier_id: int
    certification_type: str
    certification_name: str
    certificate_number: Optional[str]
    issuing_body: Optional[str]
    issue_date: Optional[datetime]
    expiry_date: datetime
    status: str
    verification_status: str
    verification_method: Optional[str]
    verification_confidence: Optional[float]
    verification_details: Optional[Dict[str, Any]]
    last_verified_at: Optional[datetime]
    needs_review: bool

    class Config:
        from_attributes = True


class VerifyCertificationResponse(BaseModel):
    success: bool
    certification: CertificationResponse
    verification_result: VerificationResult
