import logging
from datetime import datetime, timedelta, timezone

from supplyvault.database.db import SessionLocal, Base, engine
from supplyvault.models.enums import CertificationType, VerificationStatus, derive_certification_status
from supplyvault.models.models import Brand, Supplier, Certification

logger = logging.getLogger(__name__)


def _certification(supplier: Supplier, cert_type: CertificationType, name: str, number: str, days: int, now: datetime) -> Certification:
    expiry = datetime.combine((now + timedelta(days=days)).date(), datetime.min.time(), tzinfo=timezone.utc) + timedelta(hours=12)
    return Certification(
        supplier_id=supplier.id,
        certification_type=cert_type.value,
        certification_name=name,
        certificate_number=number,
        issuing_body="Demo Certification Body",
        issue_date=expiry - timedelta(days=3 * 365),
        expiry_date=expiry,
        status=derive_certification_status(expiry, now).value,
        verification_status=VerificationStatus.VERIFIED.value,
        needs_review=False
    )


def seed_data():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        now = datetime.now(timezone.utc)

        # ----------------------------
        # Brand + supplier
        # ----------------------------
        brand = Brand(email="ops@brand.test", company_name="Demo Apparel Co")
        db.add(brand)
        db.commit()
        db.refresh(brand)

        supplier = Supplier(
            brand_id=brand.id,
            name="Sample Textile Factory Ltd",
            country="Portugal",
            contact_email="quality@sample-textile.test"
        )
        db.add(supplier)
        db.commit()
        db.refresh(supplier)

        # ----------------------------
        # One certification per alert window
        # ----------------------------
        db.add_all([
            _certification(supplier, CertificationType.GOTS, "GOTS Processing", "GOTS-CU-1001", 90, now),
            _certification(supplier, CertificationType.OEKO_TEX, "OEKO-TEX Standard 100", "OT-22.HIN.1002", 30, now),
            _certification(supplier, CertificationType.SA8000, "SA8000 Social Accountability", "SA8000-2023-001", 7, now),
            _certification(supplier, CertificationType.BSCI, "amfori BSCI Audit", "BSCI-1004", 0, now),
        ])
        db.commit()
        logger.info("demo data inserted", extra={"brand_id": brand.id, "supplier_id": supplier.id})
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed_data()
