import logging
import secrets
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from supplyvault.core.config import settings
from supplyvault.database.db import get_db
from supplyvault.schemas.cron import ExpiryCheckResponse, ReverificationResponse
from supplyvault.services.email_service import get_email_service
from supplyvault.services.expiry_alert_pipeline import run_expiry_check
from supplyvault.services.reverification_pipeline import run_reverification
from supplyvault.services.verification_router import get_verification_router

router = APIRouter()
logger = logging.getLogger(__name__)


def verify_cron_secret(authorization: Optional[str] = Header(default=None)) -> None:
    """
    Rejects the request unless it carries `Bearer <CRON_SECRET>`.
    No check when no secret is configured.
    """
    secret = settings.CRON_SECRET
    if not secret:
        return
    expected = f"Bearer {secret}"
    # compare_digest only accepts ASCII str; header values may carry any latin-1 byte
    if not authorization or not secrets.compare_digest(
        authorization.encode("utf-8"), expected.encode("utf-8")
    ):
        raise HTTPException(status_code=401, detail="Unauthorized")


def _failure(job: str, exc: Exception) -> JSONResponse:
    logger.exception("cron job failed", extra={"job": job})
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": str(exc) or "Unknown error"}
    )


@router.get(
    "/cron/check-expiries",
    response_model=ExpiryCheckResponse,
    dependencies=[Depends(verify_cron_secret)]
)
async def check_expiries(
    db: Session = Depends(get_db),
    sender=Depends(get_email_service)
):
    """
    Creates 90/30/7-day and expired-today alerts and emails the brands.
    """
    try:
        results = await run_expiry_check(db, sender)
    except Exception as exc:
        return _failure("check-expiries", exc)
    return ExpiryCheckResponse(
        success=True,
        timestamp=datetime.now(timezone.utc).isoformat(),
        results=results
    )


@router.get(
    "/cron/re-verify",
    response_model=ReverificationResponse,
    dependencies=[Depends(verify_cron_secret)]
)
async def re_verify(
    db: Session = Depends(get_db),
    verification_router=Depends(get_verification_router),
    sender=Depends(get_email_service)
):
    """
    Re-verifies one batch of VERIFIED certifications not checked in the last 30 days.
    """
    try:
        results = await run_reverification(db, verification_router, sender)
    except Exception as exc:
        return _failure("re-verify", exc)
    return ReverificationResponse(
        success=True,
        timestamp=datetime.now(timezone.utc).isoformat(),
        results=results
    )
