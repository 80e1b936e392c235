from datetime import date, datetime, timezone
from typing import Callable, Optional

from supplyvault.models.enums import CertificationType, VerificationMethod, VerificationStatus
from supplyvault.schemas.verification import VerificationInput, VerificationResult
from supplyvault.services.verification.base_verifier import BaseVerifier
from supplyvault.services.verification.facility_registry import FacilityLookup, InMemoryFacilityRegistry

NAME_MATCH_THRESHOLD = 0.7
EXACT_NAME_THRESHOLD = 0.9
SAI_ISSUING_BODY = "Social Accountability International (SAI)"


def levenshtein_distance(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    """
    1 - edit distance / length of the longer string. Two empty strings are identical.
    """
    longer = max(len(a), len(b))
    if longer == 0:
        return 1.0
    return (longer - levenshtein_distance(a, b)) / longer


def _normalize_name(value: str) -> str:
    return " ".join(str(value or "").lower().split())


class SA8000Verifier(BaseVerifier):
    """
    SA8000 verifier using list matching against SAI certified facilities.

    Flow:
    - certificate number lookup in the facility registry
    - validity window check at day granularity (both ends inclusive)
    - optional fuzzy match of the supplier name against the holder name
    """

    verifier_id = "VERIFIER-SA8000"
    standard_name = "SA8000"
    supported_types = (CertificationType.SA8000,)

    def __init__(
        self,
        registry: Optional[FacilityLookup] = None,
        today: Optional[Callable[[], date]] = None
    ):
        self.registry = registry if registry is not None else InMemoryFacilityRegistry()
        self._today = today or (lambda: datetime.now(timezone.utc).date())

    async def verify(self, data: VerificationInput) -> VerificationResult:
        if not data.certificate_number:
            return self._missing_certificate_number(VerificationMethod.LIST_MATCHING)

        try:
            facility = self.registry.find_by_certificate_number(data.certificate_number)
        except Exception as exc:
            return self._lookup_unavailable(exc)

        if facility is None:
            return self._build_result(
                VerificationStatus.PENDING,
                VerificationMethod.LIST_MATCHING,
                notes=(
                    "Certificate number not found in SA8000 certified facilities database. "
                    "Manual verification recommended."
                )
            )

        today = self._today()
        if not (facility.valid_from <= today <= facility.valid_until):
            # High confidence that the certificate is not currently valid.
            return self._build_result(
                VerificationStatus.FAILED,
                VerificationMethod.LIST_MATCHING,
                confidence=0.9,
                notes="Certificate found but has expired or not yet valid",
                certificateNumber=facility.certificate_number,
                validFrom=facility.valid_from.isoformat(),
                validUntil=facility.valid_until.isoformat()
            )

        confidence = 0.9
        if data.company_name:
            similarity = string_similarity(
                _normalize_name(data.company_name),
                _normalize_name(facility.company_name)
            )
            if similarity < NAME_MATCH_THRESHOLD:
                return self._build_result(
                    VerificationStatus.FAILED,
                    VerificationMethod.LIST_MATCHING,
                    confidence=0.3,
                    notes=(
                        "Certificate number found but company name mismatch. "
                        f"Expected: {facility.company_name}, Got: {data.company_name}"
                    ),
                    certificateNumber=facility.certificate_number,
                    nameSimilarity=round(similarity, 4)
                )
            confidence = 1.0 if similarity >= EXACT_NAME_THRESHOLD else 0.85

        return self._build_result(
            VerificationStatus.VERIFIED,
            VerificationMethod.LIST_MATCHING,
            confidence=confidence,
            notes="Certificate verified against SA8000 certified facilities database",
            certificateNumber=facility.certificate_number,
            holderName=facility.company_name,
            validFrom=facility.valid_from.isoformat(),
            validUntil=facility.valid_until.isoformat(),
            scope=facility.scope,
            issuingBody=SAI_ISSUING_BODY
        )
