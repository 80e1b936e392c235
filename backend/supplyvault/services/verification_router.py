import logging
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Union

from supplyvault.core.config import settings
from supplyvault.models.enums import CertificationType, VerificationMethod, VerificationStatus
from supplyvault.schemas.verification import VerificationInput, VerificationResult
from supplyvault.services.verification.base_verifier import BaseVerifier
from supplyvault.services.verification.facility_registry import InMemoryFacilityRegistry
from supplyvault.services.verification.gots_verifier import GOTSVerifier
from supplyvault.services.verification.oekotex_verifier import OekoTexVerifier
from supplyvault.services.verification.sa8000_verifier import SA8000Verifier

logger = logging.getLogger(__name__)


def _type_key(value: Union[CertificationType, str]) -> str:
    return value.value if isinstance(value, CertificationType) else str(value or "").strip()


def build_verifier_map(verifiers: Iterable[BaseVerifier]) -> Mapping[str, BaseVerifier]:
    """
    Register every verifier under each certification type it declares.
    Later verifiers win on overlapping types.
    """
    mapping: Dict[str, BaseVerifier] = {}
    for verifier in verifiers:
        for cert_type in verifier.get_supported_types():
            mapping[_type_key(cert_type)] = verifier
    return MappingProxyType(mapping)


class VerificationRouter:
    """
    Routes verification requests to the verifier registered for a
    certification type. Never raises to its caller.
    """

    def __init__(self, verifiers: Optional[Mapping[str, BaseVerifier]] = None):
        self._verifiers: Mapping[str, BaseVerifier] = MappingProxyType(dict(verifiers or {}))

    @property
    def registered_types(self) -> List[str]:
        return sorted(self._verifiers.keys())

    def get_verifier(self, cert_type: Union[CertificationType, str]) -> Optional[BaseVerifier]:
        return self._verifiers.get(_type_key(cert_type))

    def register_verifier(self, cert_type: Union[CertificationType, str], verifier: BaseVerifier) -> "VerificationRouter":
        """
        Return a new router with `verifier` registered for `cert_type`.
        """
        mapping = dict(self._verifiers)
        mapping[_type_key(cert_type)] = verifier
        return VerificationRouter(mapping)

    async def verify(self, cert_type: Union[CertificationType, str], data: VerificationInput) -> VerificationResult:
        verifier = self.get_verifier(cert_type)

        if verifier is None:
            return VerificationResult(
                status=VerificationStatus.PENDING,
                method=VerificationMethod.MANUAL,
                confidence=0.0,
                verified=False,
                details={
                    "notes": "No automated verifier available for this certification type. Manual review required."
                }
            )

        try:
            return await verifier.verify(data)
        except Exception as exc:
            logger.exception("verification failed", extra={"certification_type": _type_key(cert_type)})
            return VerificationResult(
                status=VerificationStatus.FAILED,
                method=VerificationMethod.MANUAL,
                confidence=0.0,
                verified=False,
                details={"notes": f"Verification error: {str(exc) or 'Unknown error'}"}
            )


def _load_verifiers() -> List[BaseVerifier]:
    # Explicit verifier list keeps type registration in one place.
    registry = (
        InMemoryFacilityRegistry.from_json_file(settings.SA8000_REGISTRY_PATH)
        if settings.SA8000_REGISTRY_PATH
        else InMemoryFacilityRegistry()
    )
    return [
        SA8000Verifier(registry=registry),
        GOTSVerifier(),
        OekoTexVerifier()
    ]


def build_default_router() -> VerificationRouter:
    return VerificationRouter(build_verifier_map(_load_verifiers()))


@lru_cache(maxsize=1)
def get_verification_router() -> VerificationRouter:
    return build_default_router()
