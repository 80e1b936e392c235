from fastapi import APIRouter
from datetime import datetime, timezone

from supplyvault.services.email_service import get_email_service
from supplyvault.services.verification_router import get_verification_router

router = APIRouter()
_STARTED_AT = datetime.now(timezone.utc)

@router.get("/health")
async def get_health():
    """
    Standard health check endpoint.
    """
    return { "status": "ok", "service": "supplyvault-backend" }


@router.get("/api/v1/health")
async def get_health_v1():
    """
    Health check with uptime, email delivery and verifier status.
    """
    now = datetime.now(timezone.utc)
    uptime_seconds = int((now - _STARTED_AT).total_seconds())
    return {
        "status": "ok",
        "service": "supplyvault-backend",
        "server_time": now.isoformat(),
        "uptime_seconds": uptime_seconds,
        "email": {
            "configured": get_email_service().configured
        },
        "verifiers": get_verification_router().registered_types
    }
