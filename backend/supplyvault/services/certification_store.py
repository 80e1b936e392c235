import logging
from datetime import datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from supplyvault.models.enums import CertificationStatus, VerificationStatus
from supplyvault.models.models import Brand, Certification, Supplier
from supplyvault.schemas.verification import VerificationInput, VerificationResult

logger = logging.getLogger(__name__)


class CertificationNotFoundError(LookupError):
    pass


def _ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def day_bounds(now: datetime, days: int) -> Tuple[datetime, datetime]:
    """
    [start of day, start of next day) for the calendar day `days` after `now` (UTC).
    """
    target = (_ensure_utc(now) or datetime.now(timezone.utc)).date() + timedelta(days=days)
    start = datetime.combine(target, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def list_brands(db: Session) -> List[Brand]:
    return db.query(Brand).order_by(Brand.id.asc()).all()


def _brand_certifications(db: Session, brand_id: int):
    return (
        db.query(Certification)
        .join(Supplier, Certification.supplier_id == Supplier.id)
        .options(joinedload(Certification.supplier))
        .filter(Supplier.brand_id == brand_id)
    )


def find_certifications_expiring_in_days(
    db: Session,
    brand_id: int,
    days: int,
    now: Optional[datetime] = None
) -> List[Certification]:
    start, end = day_bounds(now or datetime.now(timezone.utc), days)
    return (
        _brand_certifications(db, brand_id)
        .filter(
            Certification.expiry_date >= start,
            Certification.expiry_date < end,
            Certification.status != CertificationStatus.EXPIRED.value
        )
        .order_by(Certification.id.asc())
        .all()
    )


def find_expired_today(db: Session, brand_id: int, now: Optional[datetime] = None) -> List[Certification]:
    # Status is not filtered: today's expiries are still flagged VALID/EXPIRING_SOON.
    start, end = day_bounds(now or datetime.now(timezone.utc), 0)
    return (
        _brand_certifications(db, brand_id)
        .filter(Certification.expiry_date >= start, Certification.expiry_date < end)
        .order_by(Certification.id.asc())
        .all()
    )


def find_verified_before(db: Session, cutoff: datetime, batch_limit: int) -> List[Certification]:
    """
    VERIFIED certifications never re-verified, or last verified before `cutoff`.
    """
    return (
        db.query(Certification)
        .options(joinedload(Certification.supplier).joinedload(Supplier.brand))
        .filter(
            Certification.verification_status == VerificationStatus.VERIFIED.value,
            or_(Certification.last_verified_at.is_(None), Certification.last_verified_at < cutoff)
        )
        .order_by(Certification.id.asc())
        .limit(batch_limit)
        .all()
    )


def get_certification(db: Session, certification_id: int) -> Optional[Certification]:
    return (
        db.query(Certification)
        .options(joinedload(Certification.supplier))
        .filter(Certification.id == certification_id)
        .first()
    )


def update_certification(db: Session, certification_id: int, fields: Dict[str, Any]) -> Certification:
    certification = db.query(Certification).filter(Certification.id == certification_id).first()
    if certification is None:
        raise CertificationNotFoundError(f"Certification {certification_id} not found")
    for key, value in fields.items():
        if not hasattr(Certification, key):
            raise AttributeError(f"Unknown certification field: {key}")
        setattr(certification, key, value)
    db.add(certification)
    db.commit()
    db.refresh(certification)
    return certification


def to_verification_input(certification: Certification) -> VerificationInput:
    supplier = certification.supplier
    return VerificationInput(
        certificate_number=certification.certificate_number or None,
        company_name=supplier.name if supplier else None,
        issuing_body=certification.issuing_body,
        issue_date=_ensure_utc(certification.issue_date),
        expiry_date=_ensure_utc(certification.expiry_date)
    )


def verification_fields(result: VerificationResult, needs_review: bool, now: datetime) -> Dict[str, Any]:
    payload = result.model_dump(mode="json")
    return {
        "verification_status": payload["status"],
        "verification_method": payload["method"],
        "verification_confidence": payload["confidence"],
        "verification_details": payload["details"],
        "last_verified_at": now,
        "needs_review": needs_review
    }
