"""Tests for verifier registration and routing."""

import pytest

from supplyvault.models.enums import CertificationType
from supplyvault.schemas.verification import VerificationInput, VerificationResult
from supplyvault.services.verification.base_verifier import BaseVerifier
from supplyvault.services.verification.gots_verifier import GOTSVerifier
from supplyvault.services.verification_router import (
    VerificationRouter,
    build_default_router,
    build_verifier_map,
)


class ExplodingVerifier(BaseVerifier):
    supported_types = (CertificationType.BSCI,)

    async def verify(self, data):
        raise ValueError("scraper crashed")


class AlwaysVerified(BaseVerifier):
    supported_types = (CertificationType.BSCI, CertificationType.WRAP)

    async def verify(self, data):
        return VerificationResult(status="VERIFIED", method="API", confidence=0.8, verified=True)


class TestBuildVerifierMap:
    def test_each_supported_type_is_registered(self):
        verifier = AlwaysVerified()
        mapping = build_verifier_map([verifier])
        assert mapping["BSCI"] is verifier
        assert mapping["WRAP"] is verifier

    def test_map_is_read_only(self):
        mapping = build_verifier_map([GOTSVerifier()])
        with pytest.raises(TypeError):
            mapping["GOTS"] = AlwaysVerified()

    def test_default_router_covers_known_standards(self):
        assert build_default_router().registered_types == ["GOTS", "OEKO_TEX", "SA8000"]


class TestVerificationRouter:
    @pytest.mark.asyncio
    async def test_unregistered_type_falls_back_to_manual_review(self):
        router = build_default_router()
        result = await router.verify(CertificationType.BSCI, VerificationInput(certificate_number="B-1"))
        assert result.status == "PENDING"
        assert result.method == "MANUAL"
        assert result.confidence == 0
        assert result.verified is False
        assert "Manual review required" in result.details["notes"]

    @pytest.mark.asyncio
    async def test_unknown_type_string_does_not_raise(self):
        result = await VerificationRouter().verify("NOT_A_STANDARD", VerificationInput())
        assert result.status == "PENDING"

    @pytest.mark.asyncio
    async def test_verifier_exception_becomes_failed_result(self):
        router = VerificationRouter(build_verifier_map([ExplodingVerifier()]))
        result = await router.verify("BSCI", VerificationInput(certificate_number="B-1"))
        assert result.status == "FAILED"
        assert result.method == "MANUAL"
        assert result.confidence == 0
        assert "scraper crashed" in result.details["notes"]

    @pytest.mark.asyncio
    async def test_routes_by_type_string_and_enum(self):
        router = VerificationRouter(build_verifier_map([AlwaysVerified()]))
        by_enum = await router.verify(CertificationType.WRAP, VerificationInput())
        by_string = await router.verify("WRAP", VerificationInput())
        assert by_enum.status == by_string.status == "VERIFIED"

    @pytest.mark.asyncio
    async def test_register_verifier_returns_new_router(self):
        base = VerificationRouter()
        extended = base.register_verifier(CertificationType.BSCI, AlwaysVerified())

        assert base.get_verifier("BSCI") is None
        assert extended.registered_types == ["BSCI"]
        result = await extended.verify("BSCI", VerificationInput())
        assert result.status == "VERIFIED"
