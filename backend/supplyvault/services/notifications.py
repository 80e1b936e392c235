import logging
from datetime import datetime, timezone
from typing import Optional

from supplyvault.core.config import settings
from supplyvault.models.models import Certification
from supplyvault.schemas.notifications import EmailResult, ExpiryAlertEmail
from supplyvault.services.email_service import NotificationSender

logger = logging.getLogger(__name__)


def certification_url(certification_id: int, app_url: Optional[str] = None) -> str:
    base = (app_url or settings.APP_URL).rstrip("/")
    return f"{base}/dashboard/certifications/{certification_id}"


def build_certification_notice(
    certification: Certification,
    to: str,
    days_until_expiry: int,
    app_url: Optional[str] = None
) -> ExpiryAlertEmail:
    expiry = certification.expiry_date
    if expiry is not None and expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    supplier = certification.supplier
    return ExpiryAlertEmail(
        to=to,
        supplier_name=supplier.name if supplier else "Unknown supplier",
        certification_name=certification.certification_name,
        certification_type=certification.certification_type,
        expiry_date=expiry or datetime.now(timezone.utc),
        days_until_expiry=days_until_expiry,
        certification_url=certification_url(certification.id, app_url)
    )


async def deliver(sender: NotificationSender, notice: ExpiryAlertEmail) -> EmailResult:
    """
    Send through `sender`, turning an unexpected exception into a failed result.
    """
    try:
        return await sender.send_expiry_alert_email(notice)
    except Exception as exc:
        logger.exception("notification sender raised", extra={"to": notice.to})
        return EmailResult(success=False, error=str(exc) or exc.__class__.__name__)
