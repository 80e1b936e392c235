"""Shared fixtures: in-memory database, record factories and a fake email sender."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from supplyvault.database.db import Base
from supplyvault.models.enums import CertificationStatus, CertificationType, VerificationStatus
from supplyvault.models.models import Brand, Certification, Supplier
from supplyvault.schemas.notifications import EmailResult, ExpiryAlertEmail

# Fixed clock for every pipeline/query test.
NOW = datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)


def start_of_day(days_from_now: int, now: datetime = NOW) -> datetime:
    day = (now + timedelta(days=days_from_now)).date()
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


class Factory:
    """Creates committed brands, suppliers and certifications."""

    def __init__(self, db):
        self.db = db
        self._counter = 0

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def brand(self, email: str = "ops@brand.test", company_name: str = "Brand Co") -> Brand:
        return self._save(Brand(email=email, company_name=company_name))

    def supplier(self, brand: Brand, name: str = "Sample Textile Factory Ltd") -> Supplier:
        return self._save(Supplier(brand_id=brand.id, name=name))

    def certification(
        self,
        supplier: Supplier,
        expiry_date: datetime,
        certification_type: str = CertificationType.GOTS.value,
        status: str = CertificationStatus.VALID.value,
        verification_status: str = VerificationStatus.PENDING.value,
        certificate_number: Optional[str] = None,
        last_verified_at: Optional[datetime] = None,
        name: Optional[str] = None,
    ) -> Certification:
        self._counter += 1
        return self._save(
            Certification(
                supplier_id=supplier.id,
                certification_type=certification_type,
                certification_name=name or f"Certification {self._counter}",
                certificate_number=certificate_number or f"CERT-{self._counter:04d}",
                issuing_body="Control Union",
                issue_date=expiry_date - timedelta(days=3 * 365),
                expiry_date=expiry_date,
                status=status,
                verification_status=verification_status,
                last_verified_at=last_verified_at,
                needs_review=False,
            )
        )


@pytest.fixture
def factory(db):
    return Factory(db)


class FakeEmailSender:
    """Records every notice; can be told to fail or raise."""

    def __init__(self, fail_with: Optional[str] = None, raise_with: Optional[Exception] = None):
        self.fail_with = fail_with
        self.raise_with = raise_with
        self.sent: List[ExpiryAlertEmail] = []

    async def send_expiry_alert_email(self, notice: ExpiryAlertEmail) -> EmailResult:
        self.sent.append(notice)
        if self.raise_with is not None:
            raise self.raise_with
        if self.fail_with is not None:
            return EmailResult(success=False, error=self.fail_with)
        return EmailResult(success=True)


@pytest.fixture
def sender():
    return FakeEmailSender()
