from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class AlertResponse(BaseModel):
    id: int
    certification_id: int
    brand_id: int
    alert_type: str
    sent_at: Optional[datetime]
    is_read: bool

    class Config:
        from_attributes = True
