"""City and postcode geocoding against the French address API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import requests

logger = logging.getLogger(__name__)

GEOCODING_ENDPOINT = "https://api-adresse.data.gouv.fr/search"


@dataclass(frozen=True)
class GeocodingResult:
    lat: float
    lng: float
    label: str
    city: str
    postcode: str


class GeocodingClient:
    """Resolve a municipality name or postcode to coordinates.

    Results are memoized per normalized query for the lifetime of the
    client. Failures are logged and reported as ``None``.
    """

    def __init__(self,
                 session: requests.Session | None = None,
                 endpoint: str = GEOCODING_ENDPOINT,
                 timeout: int = 10):
        self.session = session or requests.Session()
        self.endpoint = endpoint
        self.timeout = timeout
        self._cache: Dict[str, GeocodingResult] = {}

    def geocode(self, query: str) -> Optional[GeocodingResult]:
        normalized = query.strip().lower()
        if not normalized:
            return None
        if normalized in self._cache:
            return self._cache[normalized]

        try:
            response = self.session.get(
                self.endpoint,
                params={"q": query, "type": "municipality", "limit": "1"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            features = response.json().get("features") or []
        except (requests.RequestException, ValueError, AttributeError) as exc:
            logger.error("Geocoding failed for %r: %s", query, exc)
            return None

        if not features:
            return None
        try:
            feature = features[0]
            lng, lat = feature["geometry"]["coordinates"][:2]
            properties = feature.get("properties") or {}
            result = GeocodingResult(
                lat=float(lat),
                lng=float(lng),
                label=properties.get("label", ""),
                city=properties.get("city", ""),
                postcode=properties.get("postcode", ""),
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Unexpected geocoding payload for %r: %s", query, exc)
            return None

        self._cache[normalized] = result
        return result

    def clear_cache(self) -> None:
        self._cache.clear()
