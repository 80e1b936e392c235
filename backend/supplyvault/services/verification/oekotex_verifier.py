import logging
from typing import Optional

from supplyvault.models.enums import CertificationType, VerificationMethod, VerificationStatus
from supplyvault.schemas.verification import VerificationInput, VerificationResult
from supplyvault.services.verification.base_verifier import BaseVerifier, CertificateLookup

logger = logging.getLogger(__name__)

OEKO_TEX_LABEL_CHECK_URL = "https://www.oeko-tex.com/en/label-check"


class OekoTexVerifier(BaseVerifier):
    """
    OEKO-TEX verifier (Standard 100, Made in Green, ...).
    Certificates are checked through the public label-check page.
    """

    verifier_id = "VERIFIER-OEKO-TEX"
    standard_name = "OEKO-TEX"
    supported_types = (CertificationType.OEKO_TEX,)

    def __init__(self, lookup: Optional[CertificateLookup] = None):
        self._lookup = lookup or self._query_label_check

    async def verify(self, data: VerificationInput) -> VerificationResult:
        if not data.certificate_number:
            return self._missing_certificate_number()

        try:
            return await self._lookup(data)
        except Exception as exc:
            logger.warning(
                "oeko-tex lookup failed",
                extra={"certificate_number": data.certificate_number, "error": str(exc)}
            )
            return self._lookup_unavailable(exc)

    async def _query_label_check(self, data: VerificationInput) -> VerificationResult:
        # Scraping the label-check form is not wired up; route to manual review.
        return self._build_result(
            VerificationStatus.PENDING,
            VerificationMethod.WEB_SCRAPING,
            notes=(
                "OEKO-TEX automated verification not yet implemented. "
                f"Please verify manually at {OEKO_TEX_LABEL_CHECK_URL}"
            ),
            certificateNumber=data.certificate_number
        )
