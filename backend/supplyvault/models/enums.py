from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class CertificationType(str, Enum):
    GOTS = "GOTS"
    OEKO_TEX = "OEKO_TEX"
    SA8000 = "SA8000"
    BSCI = "BSCI"
    FAIR_TRADE = "FAIR_TRADE"
    BLUESIGN = "BLUESIGN"
    WRAP = "WRAP"
    ISO_14001 = "ISO_14001"
    OTHER = "OTHER"


class CertificationStatus(str, Enum):
    VALID = "VALID"
    EXPIRING_SOON = "EXPIRING_SOON"
    EXPIRED = "EXPIRED"


class VerificationStatus(str, Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    FAILED = "FAILED"


class VerificationMethod(str, Enum):
    MANUAL = "MANUAL"
    API = "API"
    WEB_SCRAPING = "WEB_SCRAPING"
    LIST_MATCHING = "LIST_MATCHING"


class AlertType(str, Enum):
    NINETY_DAY = "NINETY_DAY"
    THIRTY_DAY = "THIRTY_DAY"
    SEVEN_DAY = "SEVEN_DAY"
    EXPIRED = "EXPIRED"


# Lookahead window (days before expiry) -> alert type
WINDOW_ALERT_TYPES = {
    90: AlertType.NINETY_DAY,
    30: AlertType.THIRTY_DAY,
    7: AlertType.SEVEN_DAY,
}

EXPIRING_SOON_DAYS = 90


def derive_certification_status(expiry_date: datetime, now: Optional[datetime] = None) -> CertificationStatus:
    """
    Lifecycle status for a certification at write time.
    Used by seeding/import paths; the pipelines never call it.
    """
    now = now or datetime.now(timezone.utc)
    if expiry_date.tzinfo is None:
        expiry_date = expiry_date.replace(tzinfo=timezone.utc)
    days_until_expiry = (expiry_date - now).days
    if days_until_expiry < 0:
        return CertificationStatus.EXPIRED
    if days_until_expiry <= EXPIRING_SOON_DAYS:
        return CertificationStatus.EXPIRING_SOON
    return CertificationStatus.VALID
