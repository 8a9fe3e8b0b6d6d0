"""Client-side filtering, sorting and pagination of listings."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple

from .models import Category, Listing

if TYPE_CHECKING:
    from .geocoding import GeocodingClient

EARTH_RADIUS_KM = 6371
DEFAULT_RADIUS_KM = 10
PAGE_SIZE = 12
SORT_ORDERS = ("recent", "price-asc", "price-desc", "surface")


@dataclass(frozen=True)
class ListingFilters:
    """Search criteria. Every field is optional; ``None`` means "no constraint"."""

    category: Optional[Category] = None
    place_type: Optional[str] = None
    city: Optional[str] = None
    zip_code: Optional[str] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    surface_min: Optional[float] = None
    surface_max: Optional[float] = None
    rooms_min: Optional[int] = None
    rooms_max: Optional[int] = None
    center: Optional[Tuple[float, float]] = None
    radius_km: float = DEFAULT_RADIUS_KM


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _in_range(value: float, low: Optional[float], high: Optional[float]) -> bool:
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def matches(listing: Listing, filters: ListingFilters) -> bool:
    """Return True when ``listing`` satisfies every constraint in ``filters``."""
    if not _in_range(listing.price, filters.price_min, filters.price_max):
        return False
    if not _in_range(listing.square_meter, filters.surface_min, filters.surface_max):
        return False
    if filters.city and filters.city.strip().lower() not in (listing.city or "").lower():
        return False
    if filters.zip_code and not (listing.zip_code or "").startswith(filters.zip_code.strip()):
        return False
    # A listing without a room count is kept.
    if listing.number_of_beds is not None and not _in_range(
        listing.number_of_beds, filters.rooms_min, filters.rooms_max
    ):
        return False
    if filters.center is not None:
        if not listing.has_coordinates:
            return False
        distance = haversine_km(
            filters.center[0], filters.center[1], listing.latitude, listing.longitude
        )
        if distance > filters.radius_km:
            return False
    return True


def apply_filters(listings: Iterable[Listing], filters: Optional[ListingFilters]) -> List[Listing]:
    if filters is None:
        return list(listings)
    return [listing for listing in listings if matches(listing, filters)]


def resolve_search_center(
    query: str,
    listings: Sequence[Listing],
    geocoder: Optional["GeocodingClient"] = None,
) -> Optional[Tuple[float, float]]:
    """Pick the point a text search is centred on.

    The geocoder wins; otherwise the first listing matching the query by city
    or postcode that has coordinates is used. ``None`` means the caller should
    fall back to plain text matching.
    """
    query = query.strip()
    if not query:
        return None
    if geocoder is not None:
        result = geocoder.geocode(query)
        if result is not None:
            return (result.lat, result.lng)

    for listing in listings:
        if matches_query(listing, query) and listing.has_coordinates:
            return (listing.latitude, listing.longitude)
    return None


def matches_query(listing: Listing, query: str) -> bool:
    """Free-text match on city (case-insensitive) or postcode."""
    needle = query.strip().lower()
    return needle in (listing.city or "").lower() or needle in (listing.zip_code or "")


def _published_at(listing: Listing) -> float:
    try:
        return datetime.fromisoformat(listing.date.replace("Z", "+00:00")).timestamp()
    except (AttributeError, ValueError):
        return 0.0


def sort_listings(listings: Iterable[Listing], order: str = "recent") -> List[Listing]:
    items = list(listings)
    if order == "price-asc":
        return sorted(items, key=lambda listing: listing.price)
    if order == "price-desc":
        return sorted(items, key=lambda listing: listing.price, reverse=True)
    if order == "surface":
        return sorted(items, key=lambda listing: listing.square_meter, reverse=True)
    return sorted(items, key=_published_at, reverse=True)


def paginate(listings: Sequence[Listing], displayed_count: int = PAGE_SIZE) -> Tuple[List[Listing], bool]:
    """Return the visible slice and whether more listings remain."""
    visible = list(listings[:displayed_count])
    return visible, displayed_count < len(listings)
