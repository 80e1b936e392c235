import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from supplyvault.core.config import settings
from supplyvault.models.enums import WINDOW_ALERT_TYPES, AlertType, CertificationStatus
from supplyvault.models.models import Brand, Certification
from supplyvault.schemas.cron import ExpiryCheckResults
from supplyvault.services.alert_store import alert_exists, create_expiry_alert
from supplyvault.services.certification_store import (
    find_certifications_expiring_in_days,
    find_expired_today,
    list_brands,
    update_certification,
)
from supplyvault.services.email_service import NotificationSender
from supplyvault.services.notifications import build_certification_notice, deliver

logger = logging.getLogger(__name__)


def _resolve_windows(windows: Optional[Iterable[int]]) -> List[Tuple[int, AlertType]]:
    resolved: List[Tuple[int, AlertType]] = []
    for days in windows if windows is not None else settings.ALERT_WINDOW_DAYS:
        alert_type = WINDOW_ALERT_TYPES.get(int(days))
        if alert_type is None:
            logger.warning("unsupported alert window skipped", extra={"days": days})
            continue
        resolved.append((int(days), alert_type))
    return resolved


class ExpiryAlertPipeline:
    """
    Walks every brand across the lookahead windows (90/30/7 days, then
    expired today) and makes sure one alert exists per
    (certification, alert type), emailing the brand for each new alert.

    Side effects are committed as they happen; a failing certification or
    brand is recorded in `errors` and the run moves on.
    """

    def __init__(
        self,
        db: Session,
        sender: NotificationSender,
        windows: Optional[Iterable[int]] = None,
        app_url: Optional[str] = None
    ):
        self.db = db
        self.sender = sender
        self.windows = _resolve_windows(windows)
        self.app_url = app_url

    async def run(self, now: Optional[datetime] = None) -> ExpiryCheckResults:
        # One clock reading per run keeps every day bucket consistent.
        now = now or datetime.now(timezone.utc)
        results = ExpiryCheckResults()

        brands = list_brands(self.db)
        for brand in brands:
            brand_id = brand.id
            try:
                await self._process_brand(brand, now, results)
            except Exception as exc:
                self.db.rollback()
                logger.exception("brand expiry check failed", extra={"brand_id": brand_id})
                results.errors.append(f"Error processing brand {brand_id}: {exc}")

        logger.info(
            "expiry check finished",
            extra={
                "brands": len(brands),
                "processed": results.processed,
                "alerts_created": results.alerts_created,
                "emails_sent": results.emails_sent,
                "errors": len(results.errors)
            }
        )
        return results

    async def _process_brand(self, brand: Brand, now: datetime, results: ExpiryCheckResults) -> None:
        for days, alert_type in self.windows:
            certifications = find_certifications_expiring_in_days(self.db, brand.id, days, now=now)
            for certification in certifications:
                await self._process_certification(
                    brand, certification, alert_type, days, now, results,
                    label=f"({days} days)"
                )

        for certification in find_expired_today(self.db, brand.id, now=now):
            await self._process_certification(
                brand, certification, AlertType.EXPIRED, 0, now, results,
                label="(expired)"
            )

    async def _process_certification(
        self,
        brand: Brand,
        certification: Certification,
        alert_type: AlertType,
        days_until_expiry: int,
        now: datetime,
        results: ExpiryCheckResults,
        label: str
    ) -> None:
        certification_id = certification.id
        try:
            if not alert_exists(self.db, certification_id, alert_type):
                alert = create_expiry_alert(self.db, certification_id, brand.id, alert_type, sent_at=now)
                if alert is not None:
                    results.alerts_created += 1
                    notice = build_certification_notice(
                        certification, brand.email, days_until_expiry, app_url=self.app_url
                    )
                    email = await deliver(self.sender, notice)
                    if email.success:
                        results.emails_sent += 1
                    else:
                        logger.warning(
                            "expiry email failed",
                            extra={"certification_id": certification_id, "error": email.error}
                        )
                        results.errors.append(
                            f"Failed to send email for cert {certification_id}: {email.error}"
                        )

            if alert_type == AlertType.EXPIRED and certification.status != CertificationStatus.EXPIRED.value:
                update_certification(self.db, certification_id, {"status": CertificationStatus.EXPIRED.value})

            results.processed += 1
        except Exception as exc:
            self.db.rollback()
            logger.warning(
                "certification expiry check failed",
                extra={"certification_id": certification_id, "alert_type": alert_type.value, "error": str(exc)}
            )
            results.errors.append(f"Error processing cert {certification_id} {label}: {exc}")


async def run_expiry_check(
    db: Session,
    sender: NotificationSender,
    now: Optional[datetime] = None,
    windows: Optional[Iterable[int]] = None,
    app_url: Optional[str] = None
) -> ExpiryCheckResults:
    return await ExpiryAlertPipeline(db, sender, windows=windows, app_url=app_url).run(now=now)
