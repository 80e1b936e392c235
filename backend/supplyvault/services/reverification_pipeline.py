import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from supplyvault.core.config import settings
from supplyvault.models.enums import VerificationStatus
from supplyvault.schemas.cron import ReverificationResults
from supplyvault.schemas.notifications import REVOCATION_NOTICE_DAYS
from supplyvault.services.certification_store import (
    find_verified_before,
    to_verification_input,
    update_certification,
    verification_fields,
)
from supplyvault.services.email_service import NotificationSender
from supplyvault.services.notifications import build_certification_notice, deliver
from supplyvault.services.verification_router import VerificationRouter

logger = logging.getLogger(__name__)

REVOKED_STATUSES = {VerificationStatus.FAILED.value, VerificationStatus.PENDING.value}


def is_revoked(status: str) -> bool:
    return str(status) in REVOKED_STATUSES


async def run_reverification(
    db: Session,
    router: VerificationRouter,
    sender: NotificationSender,
    now: Optional[datetime] = None,
    batch_limit: Optional[int] = None,
    max_age_days: Optional[int] = None,
    app_url: Optional[str] = None
) -> ReverificationResults:
    """
    Re-check one bounded batch of VERIFIED certifications that were never
    re-verified or were last verified more than `max_age_days` ago.

    A result that is no longer VERIFIED counts as revoked: the certification
    is flagged for review and the owning brand gets a revocation notice.
    """
    now = now or datetime.now(timezone.utc)
    limit = batch_limit if batch_limit is not None else settings.REVERIFY_BATCH_LIMIT
    age_days = max_age_days if max_age_days is not None else settings.REVERIFY_MAX_AGE_DAYS
    cutoff = now - timedelta(days=age_days)

    results = ReverificationResults()
    certifications = find_verified_before(db, cutoff, limit)

    for certification in certifications:
        certification_id = certification.id
        try:
            result = await router.verify(certification.certification_type, to_verification_input(certification))
            revoked = is_revoked(result.status)

            notice = None
            if revoked:
                notice = build_certification_notice(
                    certification, certification.supplier.brand.email, REVOCATION_NOTICE_DAYS, app_url=app_url
                )

            update_certification(db, certification_id, verification_fields(result, revoked, now))

            if revoked:
                results.revoked += 1
                email = await deliver(sender, notice)
                if not email.success:
                    logger.warning(
                        "revocation email failed",
                        extra={"certification_id": certification_id, "error": email.error}
                    )
                    results.errors.append(
                        f"Failed to send revocation email for cert {certification_id}: {email.error}"
                    )
            else:
                results.reverified += 1

            results.processed += 1
        except Exception as exc:
            db.rollback()
            logger.warning(
                "re-verification failed",
                extra={"certification_id": certification_id, "error": str(exc)}
            )
            results.failed += 1
            results.errors.append(f"Failed to re-verify cert {certification_id}: {exc}")

    logger.info(
        "re-verification finished",
        extra={
            "batch": len(certifications),
            "processed": results.processed,
            "reverified": results.reverified,
            "revoked": results.revoked,
            "failed": results.failed
        }
    )
    return results
