from datetime import datetime
from typing import Optional

from pydantic import BaseModel

# daysUntilExpiry sentinel for "verification revoked" notices
REVOCATION_NOTICE_DAYS = -1


class ExpiryAlertEmail(BaseModel):
    to: str
    supplier_name: str
    certification_name: str
    certification_type: str
    expiry_date: datetime
    days_until_expiry: int
    certification_url: str


class EmailResult(BaseModel):
    success: bool
    error: Optional[str] = None
