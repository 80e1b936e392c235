from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from supplyvault.database.db import get_db
from supplyvault.models.enums import VerificationStatus
from supplyvault.schemas.certifications import CertificationResponse, VerifyCertificationResponse
from supplyvault.services.certification_store import (
    get_certification,
    to_verification_input,
    update_certification,
    verification_fields,
)
from supplyvault.services.verification_router import get_verification_router

router = APIRouter()


@router.get("/certifications/{certification_id}", response_model=CertificationResponse)
def get_certification_detail(certification_id: int, db: Session = Depends(get_db)):
    certification = get_certification(db, certification_id)
    if not certification:
        raise HTTPException(status_code=404, detail="Certification not found")
    return certification


@router.post("/certifications/{certification_id}/verify", response_model=VerifyCertificationResponse)
async def verify_certification(
    certification_id: int,
    db: Session = Depends(get_db),
    verification_router=Depends(get_verification_router)
):
    """
    Runs automated verification for one certification and stores the outcome.
    """
    certification = get_certification(db, certification_id)
    if not certification:
        raise HTTPException(status_code=404, detail="Certification not found")

    result = await verification_router.verify(
        certification.certification_type,
        to_verification_input(certification)
    )

    now = datetime.now(timezone.utc)
    fields = verification_fields(
        result,
        needs_review=not result.verified and result.status == VerificationStatus.PENDING.value,
        now=now
    )
    fields["verification_date"] = now
    updated = update_certification(db, certification_id, fields)

    return VerifyCertificationResponse(
        success=True,
        certification=CertificationResponse.model_validate(updated),
        verification_result=result
    )
