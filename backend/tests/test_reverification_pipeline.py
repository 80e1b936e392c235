"""Tests for the periodic re-verification pipeline."""

from datetime import timedelta

import pytest

from conftest import NOW, FakeEmailSender, start_of_day
from supplyvault.models.enums import CertificationType, VerificationStatus
from supplyvault.models.models import Certification
from supplyvault.schemas.verification import VerificationResult
from supplyvault.services.reverification_pipeline import is_revoked, run_reverification
from supplyvault.services.verification.facility_registry import CertifiedFacility, InMemoryFacilityRegistry
from supplyvault.services.verification.sa8000_verifier import SA8000Verifier
from supplyvault.services.verification_router import VerificationRouter, build_verifier_map

VERIFIED = VerificationStatus.VERIFIED.value


class StubRouter:
    """Returns a fixed result, or raises for selected certificate numbers."""

    def __init__(self, status="VERIFIED", raise_for=()):
        self.status = status
        self.raise_for = set(raise_for)
        self.calls = []

    async def verify(self, cert_type, data):
        self.calls.append((cert_type, data))
        if data.certificate_number in self.raise_for:
            raise RuntimeError("router unavailable")
        return VerificationResult(
            status=self.status,
            method="LIST_MATCHING",
            confidence=0.9 if self.status == "VERIFIED" else 0.0,
            verified=self.status == "VERIFIED",
            details={"notes": "stub"},
        )


def _reload(db, certification_id):
    db.expire_all()
    return db.get(Certification, certification_id)


def test_revoked_statuses():
    assert is_revoked("FAILED") is True
    assert is_revoked("PENDING") is True
    assert is_revoked("VERIFIED") is False


@pytest.mark.asyncio
async def test_still_verified_clears_review_flag(db, factory, sender):
    cert = factory.certification(factory.supplier(factory.brand()), start_of_day(200), verification_status=VERIFIED)

    results = await run_reverification(db, StubRouter("VERIFIED"), sender, now=NOW)

    stored = _reload(db, cert.id)
    assert results.processed == 1
    assert results.reverified == 1
    assert results.revoked == 0
    assert stored.needs_review is False
    assert stored.verification_status == "VERIFIED"
    assert stored.verification_confidence == 0.9
    assert stored.verification_details == {"notes": "stub"}
    assert stored.last_verified_at.replace(tzinfo=None) == NOW.replace(tzinfo=None)
    assert sender.sent == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["PENDING", "FAILED"])
async def test_unverified_result_is_revoked(db, factory, sender, status):
    brand = factory.brand(email="ops@brand.test")
    cert = factory.certification(factory.supplier(brand), start_of_day(200), verification_status=VERIFIED)

    results = await run_reverification(db, StubRouter(status), sender, now=NOW)

    stored = _reload(db, cert.id)
    assert results.revoked == 1
    assert results.reverified == 0
    assert stored.needs_review is True
    assert stored.verification_status == status
    assert len(sender.sent) == 1
    assert sender.sent[0].to == "ops@brand.test"
    assert sender.sent[0].days_until_expiry == -1


@pytest.mark.asyncio
async def test_batch_selection_by_last_verified(db, factory, sender):
    supplier = factory.supplier(factory.brand())
    expiry = start_of_day(200)
    never = factory.certification(supplier, expiry, verification_status=VERIFIED)
    recent = factory.certification(supplier, expiry, verification_status=VERIFIED, last_verified_at=NOW - timedelta(days=29))
    stale = factory.certification(supplier, expiry, verification_status=VERIFIED, last_verified_at=NOW - timedelta(days=31))
    router = StubRouter("VERIFIED")

    results = await run_reverification(db, router, sender, now=NOW)

    checked = {data.certificate_number for _, data in router.calls}
    assert checked == {never.certificate_number, stale.certificate_number}
    assert recent.certificate_number not in checked
    assert results.processed == 2

    again = await run_reverification(db, router, sender, now=NOW)
    assert again.processed == 0


@pytest.mark.asyncio
async def test_batch_limit_bounds_the_run(db, factory, sender):
    supplier = factory.supplier(factory.brand())
    for _ in range(4):
        factory.certification(supplier, start_of_day(200), verification_status=VERIFIED)

    results = await run_reverification(db, StubRouter("VERIFIED"), sender, now=NOW, batch_limit=3)

    assert results.processed == 3


@pytest.mark.asyncio
async def test_email_failure_keeps_verification_update(db, factory):
    sender = FakeEmailSender(fail_with="quota exceeded")
    cert = factory.certification(factory.supplier(factory.brand()), start_of_day(200), verification_status=VERIFIED)

    results = await run_reverification(db, StubRouter("FAILED"), sender, now=NOW)

    stored = _reload(db, cert.id)
    assert results.revoked == 1
    assert results.failed == 0
    assert results.errors == [f"Failed to send revocation email for cert {cert.id}: quota exceeded"]
    assert stored.verification_status == "FAILED"
    assert stored.needs_review is True


@pytest.mark.asyncio
async def test_per_certification_failure_continues(db, factory, sender):
    supplier = factory.supplier(factory.brand())
    broken = factory.certification(supplier, start_of_day(200), verification_status=VERIFIED, certificate_number="BROKEN")
    healthy = factory.certification(supplier, start_of_day(200), verification_status=VERIFIED)

    results = await run_reverification(db, StubRouter("VERIFIED", raise_for={"BROKEN"}), sender, now=NOW)

    assert results.failed == 1
    assert results.reverified == 1
    assert results.processed == 1
    assert results.errors == [f"Failed to re-verify cert {broken.id}: router unavailable"]
    assert _reload(db, healthy.id).last_verified_at is not None
    assert _reload(db, broken.id).last_verified_at is None


@pytest.mark.asyncio
async def test_real_router_with_sa8000_registry(db, factory, sender):
    today = NOW.date()
    registry = InMemoryFacilityRegistry([
        CertifiedFacility("SA-OK", "Mill One", today - timedelta(days=300), today + timedelta(days=300)),
        CertifiedFacility("SA-OLD", "Mill One", today - timedelta(days=900), today - timedelta(days=1)),
    ])
    router = VerificationRouter(build_verifier_map([SA8000Verifier(registry=registry, today=lambda: today)]))
    supplier = factory.supplier(factory.brand(), name="Mill One")
    ok = factory.certification(
        supplier, start_of_day(300), certification_type=CertificationType.SA8000.value,
        verification_status=VERIFIED, certificate_number="SA-OK",
    )
    old = factory.certification(
        supplier, start_of_day(300), certification_type=CertificationType.SA8000.value,
        verification_status=VERIFIED, certificate_number="SA-OLD",
    )
    unsupported = factory.certification(
        supplier, start_of_day(300), certification_type=CertificationType.BSCI.value,
        verification_status=VERIFIED,
    )

    results = await run_reverification(db, router, sender, now=NOW)

    assert results.reverified == 1
    assert results.revoked == 2
    assert _reload(db, ok.id).verification_confidence == 1.0
    assert _reload(db, old.id).verification_status == "FAILED"
    assert _reload(db, unsupported.id).verification_method == "MANUAL"
    assert _reload(db, unsupported.id).needs_review is True
