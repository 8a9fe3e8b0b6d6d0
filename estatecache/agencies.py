"""Static directory of the agencies publishing listings, keyed by SIRET."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .models import ListingDetail


@dataclass(frozen=True)
class AgencyInfo:
    name: str
    address: str
    zip_code: str
    city: str
    phone: Optional[str] = None


AGENCIES_BY_SIRET: Dict[str, AgencyInfo] = {
    "37795663600023": AgencyInfo("Sergic Entreprises", "6 rue Konrad Adenauer", "59290", "Wasquehal", "03 20 19 02 11"),
    "37795663600064": AgencyInfo("Sergic Entreprises", "45 rue de Lourmel", "75015", "Paris", "01 45 75 67 00"),
    "37795663600072": AgencyInfo("Sergic Entreprises", "1 rue Henri IV", "80000", "Amiens", "03 22 91 23 95"),
    "37795663600098": AgencyInfo("Sergic Entreprises", "14 avenue de Pince Vent", "94430", "Chennevières-sur-Marne", "01 45 94 00 00"),
    "39783755000045": AgencyInfo("Immorevel 06", "9 rue Longchamp", "06000", "Nice", "04 93 85 85 85"),
    "42205515200025": AgencyInfo("Tassou Gestion", "58 rue Maurice Thorez", "92000", "Nanterre", "01 47 21 00 00"),
    "42874890900028": AgencyInfo("Sergic", "64 avenue Robert Schuman", "59370", "Mons-en-Barœul", "03 20 61 78 73"),
    "42874890900044": AgencyInfo("Sergic", "4-6 rue Jeanne Maillotte", "59110", "La Madeleine", "03 20 12 17 77"),
    "42874890900051": AgencyInfo("Sergic", "1 rue Henri IV", "80000", "Amiens", "03 22 91 23 95"),
    "42874890900077": AgencyInfo("Sergic", "Rue Victor Petit", "80550", "Le Crotoy", "03 22 27 07 10"),
}


def lookup_agency(detail: ListingDetail) -> Optional[AgencyInfo]:
    if detail.agency is None:
        return None
    return AGENCIES_BY_SIRET.get(detail.agency.siret.strip())
