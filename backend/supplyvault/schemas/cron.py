from typing import List

from pydantic import BaseModel, Field


class ExpiryCheckResults(BaseModel):
    processed: int = 0
    alerts_created: int = Field(default=0, alias="alertsCreated")
    emails_sent: int = Field(default=0, alias="emailsSent")
    errors: List[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class ReverificationResults(BaseModel):
    processed: int = 0
    reverified: int = 0
    revoked: int = 0
    failed: int = 0
    errors: List[str] = Field(default_factory=list)


class ExpiryCheckResponse(BaseModel):
    success: bool
    timestamp: str
    results: ExpiryCheckResults


class ReverificationResponse(BaseModel):
    success: bool
    timestamp: str
    results: ReverificationResults
