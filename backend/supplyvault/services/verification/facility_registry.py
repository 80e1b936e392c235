import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CertifiedFacility:
    certificate_number: str
    company_name: str
    valid_from: date
    valid_until: date
    scope: str = ""


class FacilityLookup(Protocol):
    def find_by_certificate_number(self, certificate_number: str) -> Optional[CertifiedFacility]:
        ...


# Placeholder until the SAI certified-facilities list is integrated.
SAMPLE_FACILITIES = [
    CertifiedFacility(
        certificate_number="SA8000-2023-001",
        company_name="Sample Textile Factory Ltd",
        valid_from=date(2023, 1, 1),
        valid_until=date(2027, 12, 31),
        scope="Garment Manufacturing"
    ),
]


def _parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


class InMemoryFacilityRegistry:
    """
    SA8000 certified facilities keyed by upper-cased certificate number.
    """

    def __init__(self, facilities: Optional[Iterable[CertifiedFacility]] = None):
        self._facilities: Dict[str, CertifiedFacility] = {}
        for facility in facilities if facilities is not None else SAMPLE_FACILITIES:
            self._facilities[self._key(facility.certificate_number)] = facility

    def _key(self, certificate_number: str) -> str:
        return str(certificate_number or "").strip().upper()

    def find_by_certificate_number(self, certificate_number: str) -> Optional[CertifiedFacility]:
        return self._facilities.get(self._key(certificate_number))

    def __len__(self) -> int:
        return len(self._facilities)

    @classmethod
    def from_json_file(cls, path: str) -> "InMemoryFacilityRegistry":
        """
        Load a registry export shaped as a list of objects with
        certificate_number, company_name, valid_from, valid_until and scope.
        """
        with open(path, "r", encoding="utf-8") as handle:
            rows = json.load(handle)
        facilities: List[CertifiedFacility] = []
        for row in rows:
            try:
                facilities.append(
                    CertifiedFacility(
                        certificate_number=str(row["certificate_number"]),
                        company_name=str(row["company_name"]),
                        valid_from=_parse_date(row["valid_from"]),
                        valid_until=_parse_date(row["valid_until"]),
                        scope=str(row.get("scope") or "")
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.warning("sa8000 registry row skipped", extra={"path": path, "row": row})
        logger.info("sa8000 registry loaded", extra={"path": path, "facilities": len(facilities)})
        return cls(facilities)
