import logging
from typing import Optional

from supplyvault.models.enums import CertificationType, VerificationMethod, VerificationStatus
from supplyvault.schemas.verification import VerificationInput, VerificationResult
from supplyvault.services.verification.base_verifier import BaseVerifier, CertificateLookup

logger = logging.getLogger(__name__)

GOTS_PUBLIC_DATABASE_URL = "https://www.global-standard.org/public-database"


class GOTSVerifier(BaseVerifier):
    """
    GOTS (Global Organic Textile Standard) verifier.

    GOTS publishes certified entities in a public database. No API is
    integrated yet, so the default lookup only routes the certificate to
    manual review. A real client can be passed in as `lookup`.
    """

    verifier_id = "VERIFIER-GOTS"
    standard_name = "GOTS"
    supported_types = (CertificationType.GOTS,)

    def __init__(self, lookup: Optional[CertificateLookup] = None):
        self._lookup = lookup or self._query_gots_database

    async def verify(self, data: VerificationInput) -> VerificationResult:
        if not data.certificate_number:
            return self._missing_certificate_number()

        try:
            return await self._lookup(data)
        except Exception as exc:
            logger.warning(
                "gots lookup failed",
                extra={"certificate_number": data.certificate_number, "error": str(exc)}
            )
            return self._lookup_unavailable(exc)

    async def _query_gots_database(self, data: VerificationInput) -> VerificationResult:
        return self._build_result(
            VerificationStatus.PENDING,
            VerificationMethod.API,
            notes=(
                "GOTS automated verification not yet implemented. "
                f"Please verify manually at {GOTS_PUBLIC_DATABASE_URL}"
            ),
            certificateNumber=data.certificate_number
        )
