"""Core data models for estatecache."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from bs4 import BeautifulSoup

from .errors import StorageError


class Category(str, Enum):
    """Contract category of a listing, valued with the API wire names."""

    PURCHASE = "achat"
    RENTAL = "location"
    HOLIDAY = "vacance"


def _known_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {key: value for key, value in data.items() if key in names}


@dataclass(frozen=True)
class Listing:
    """Summary of a property announcement as returned by the list endpoint."""

    reference: str
    slug: str = ""
    city: str = ""
    zip_code: str = ""
    price: float = 0
    square_meter: float = 0
    type: str = ""
    contract_type: str = ""
    place_type: str = ""
    label_type: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    number_of_beds: Optional[int] = None
    picture: str = ""
    pictures: Optional[List[str]] = None
    date: str = ""
    benefit: str = ""
    is_professional: bool = False
    is_exact_location: bool = False
    rental_ht_hc: Optional[float] = None
    is_agency_cost: bool = False
    expense_search: Optional[float] = None
    detail: str = ""
    # Enriched lazily from the detail endpoint.
    title: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Listing":
        return cls(**_known_fields(cls, data))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def has_coordinates(self) -> bool:
        return bool(self.latitude) and bool(self.longitude)


@dataclass(frozen=True)
class ListingExtra:
    """Free-form name/value attribute attached to a listing detail."""

    name: str
    value: Optional[str] = None


@dataclass(frozen=True)
class EnergyDiagnostic:
    """Energy (DPE) and emissions (GES) ratings."""

    is_diagnostic: bool = False
    number_dpe: Optional[float] = None
    letter_dpe: Optional[str] = None
    number_ges: Optional[float] = None
    letter_ges: Optional[str] = None
    date: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    price_index: Optional[float] = None


@dataclass(frozen=True)
class Agency:
    siret: str


@dataclass(frozen=True)
class ListingDetail(Listing):
    """Full announcement as returned by the detail endpoint."""

    agency: Optional[Agency] = None
    announcement_extras: List[ListingExtra] = field(default_factory=list)
    number_of_bedrooms: Optional[int] = None
    dpe: Optional[EnergyDiagnostic] = None
    available_at: Optional[str] = None
    self_url: str = ""
    list_url: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ListingDetail":
        payload = dict(data)
        # The API names its navigation links "self" and "list".
        if "self" in payload:
            payload["self_url"] = payload.pop("self")
        if "list" in payload:
            payload["list_url"] = payload.pop("list")
        payload = _known_fields(cls, payload)
        agency = payload.get("agency")
        if isinstance(agency, dict):
            payload["agency"] = Agency(siret=str(agency.get("siret", "")))
        dpe = payload.get("dpe")
        if isinstance(dpe, dict):
            payload["dpe"] = EnergyDiagnostic(**_known_fields(EnergyDiagnostic, dpe))
        payload["announcement_extras"] = [
            ListingExtra(name=item.get("name", ""), value=item.get("value"))
            for item in payload.get("announcement_extras") or []
            if isinstance(item, dict)
        ]
        return cls(**payload)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["self"] = data.pop("self_url")
        data["list"] = data.pop("list_url")
        return data

    def extra(self, name: str) -> Optional[str]:
        for item in self.announcement_extras:
            if item.name == name:
                return item.value
        return None

    def extra_number(self, name: str) -> Optional[float]:
        value = self.extra(name)
        if not value:
            return None
        try:
            return float(value)
        except ValueError:
            return None

    def extra_pictures(self) -> List[str]:
        """Decode the JSON-encoded picture list carried in the ``pictures`` extra."""
        raw = self.extra("pictures")
        if not raw:
            return []
        try:
            pictures = json.loads(raw)
        except ValueError:
            return []
        if not isinstance(pictures, list):
            return []
        return [str(picture) for picture in pictures]

    def description_text(self) -> str:
        """Return the description extra as plain text."""
        raw = self.extra("description") or ""
        if not raw:
            return ""
        soup = BeautifulSoup(raw, "html.parser")
        return soup.get_text(" ", strip=True)


@dataclass
class ListingPage:
    """A page of listings as returned by the list endpoints."""

    announcements: List[Listing]
    total_result: int
    self_url: str = ""
    order: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ListingPage":
        announcements = [
            Listing.from_dict(item)
            for item in data.get("announcements") or []
            if isinstance(item, dict)
        ]
        total = data.get("total_result")
        return cls(
            announcements=announcements,
            total_result=int(total) if total is not None else len(announcements),
            self_url=data.get("self") or "",
            order=data.get("order") or "",
        )


T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """Timestamped envelope stored under a cache key."""

    data: T
    timestamp: int


@dataclass
class StorageResult(Generic[T]):
    """Outcome of a storage call: either a value or the error that prevented it."""

    value: Optional[T] = None
    error: Optional[StorageError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: T) -> T:
        if self.error is not None or self.value is None:
            return default
        return self.value
