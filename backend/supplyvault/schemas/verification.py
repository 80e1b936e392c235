from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from supplyvault.models.enums import VerificationMethod, VerificationStatus


class VerificationInput(BaseModel):
    certificate_number: Optional[str] = None
    company_name: Optional[str] = None
    issuing_body: Optional[str] = None
    issue_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None


class VerificationResult(BaseModel):
    status: VerificationStatus
    method: VerificationMethod
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    verified: bool = False
    # notes, certificateNumber, holderName, validFrom, validUntil, scope, issuingBody, ...
    details: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        use_enum_values = True
