from typing import Any, Awaitable, Callable, Dict, Tuple

from supplyvault.models.enums import CertificationType, VerificationMethod, VerificationStatus
from supplyvault.schemas.verification import VerificationInput, VerificationResult

# Async external lookup: (input) -> result. Plugged into verifiers backed by a registry or website.
CertificateLookup = Callable[[VerificationInput], Awaitable[VerificationResult]]


class BaseVerifier:
    """
    Base verifier with helper utilities to emit normalized verification results.
    """

    verifier_id: str = "VERIFIER-BASE"
    standard_name: str = "Base Standard"
    supported_types: Tuple[CertificationType, ...] = ()

    async def verify(self, data: VerificationInput) -> VerificationResult:
        raise NotImplementedError()

    def get_supported_types(self) -> Tuple[CertificationType, ...]:
        return tuple(self.supported_types)

    def _build_result(
        self,
        status: VerificationStatus,
        method: VerificationMethod,
        confidence: float = 0.0,
        notes: str = "",
        **details: Any
    ) -> VerificationResult:
        payload: Dict[str, Any] = {k: v for k, v in details.items() if v is not None}
        if notes:
            payload["notes"] = notes
        return VerificationResult(
            status=status,
            method=method,
            confidence=confidence,
            verified=status == VerificationStatus.VERIFIED,
            details=payload
        )

    def _missing_certificate_number(self, method: VerificationMethod = VerificationMethod.MANUAL) -> VerificationResult:
        return self._build_result(
            VerificationStatus.PENDING,
            method,
            notes=f"Certificate number is required for {self.standard_name} verification"
        )

    def _lookup_unavailable(self, error: Exception) -> VerificationResult:
        return self._build_result(
            VerificationStatus.PENDING,
            VerificationMethod.MANUAL,
            notes=(
                f"{self.standard_name} verification service unavailable: {str(error) or 'Unknown error'}. "
                "Manual verification required."
            )
        )
