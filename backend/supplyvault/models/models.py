from datetime import timezone

from sqlalchemy import Boolean, Column, Integer, String, Float, DateTime, ForeignKey, JSON, TypeDecorator, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from supplyvault.database.db import Base


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime stored as UTC.

    SQLite keeps no offset, so values are converted to UTC before they are
    bound and read back as UTC. Naive values are taken to be UTC already.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Brand(Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False)
    company_name = Column(String, nullable=False)
    created_at = Column(UTCDateTime, server_default=func.now())

    suppliers = relationship("Supplier", back_populates="brand")


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id"), index=True, nullable=False)
    name = Column(String, nullable=False)
    country = Column(String)
    contact_email = Column(String)
    created_at = Column(UTCDateTime, server_default=func.now())

    brand = relationship("Brand", back_populates="suppliers")
    certifications = relationship("Certification", back_populates="supplier")


class Certification(Base):
    __tablename__ = "certifications"

    id = Column(Integer, primary_key=True, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), index=True, nullable=False)
    certification_type = Column(String, nullable=False)  # CertificationType
    certification_name = Column(String, nullable=False)
    certificate_number = Column(String)
    issuing_body = Column(String)
    issue_date = Column(UTCDateTime)
    expiry_date = Column(UTCDateTime, index=True, nullable=False)
    status = Column(String, default="VALID", nullable=False)  # VALID, EXPIRING_SOON, EXPIRED
    verification_status = Column(String, default="PENDING", index=True)  # PENDING, VERIFIED, FAILED
    verification_method = Column(String)  # MANUAL, API, WEB_SCRAPING, LIST_MATCHING
    verification_confidence = Column(Float)
    verification_details = Column(JSON)
    verification_date = Column(UTCDateTime)
    last_verified_at = Column(UTCDateTime)
    needs_review = Column(Boolean, default=False, nullable=False)
    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())

    supplier = relationship("Supplier", back_populates="certifications")


class Alert(Base):
    __tablename__ = "alerts"
    __table_args__ = (
        UniqueConstraint("certification_id", "alert_type", name="uq_alert_certification_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    certification_id = Column(Integer, ForeignKey("certifications.id"), index=True, nullable=False)
    brand_id = Column(Integer, ForeignKey("brands.id"), index=True, nullable=False)
    alert_type = Column(String, nullable=False)  # NINETY_DAY, THIRTY_DAY, SEVEN_DAY, EXPIRED
    sent_at = Column(UTCDateTime, server_default=func.now())
    is_read = Column(Boolean, default=False, nullable=False)
