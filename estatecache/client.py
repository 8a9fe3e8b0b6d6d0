"""HTTP client for the listings API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple, TypeVar
from urllib.parse import quote

import requests

from .models import Category, ListingDetail, ListingPage

if TYPE_CHECKING:
    from .filters import ListingFilters

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 20

T = TypeVar("T")


class ListingApiClient:
    """Lightweight wrapper around the announcements API."""

    def __init__(self,
                 api_url: str,
                 api_token: str = "",
                 session: requests.Session | None = None,
                 timeout: int = DEFAULT_TIMEOUT):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": "estatecache/1.0",
            "Accept": "application/json",
        })
        if api_token:
            self.session.headers["api-token"] = api_token

    @property
    def announcements_url(self) -> str:
        return f"{self.api_url}/announcements/"

    @property
    def holidays_url(self) -> str:
        return f"{self.api_url}/holidays/"

    def get(self, url: str, params: List[Tuple[str, str]] | None = None) -> dict:
        logger.debug("GET %s params=%s", url, params)
        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"Unexpected response payload: {payload!r}")
        return payload

    def fetch_listings(self,
                       filters: Optional["ListingFilters"] = None,
                       category: Optional[Category] = None) -> ListingPage:
        params = query_params(filters, category=category)
        return _parse(ListingPage.from_dict, self.get(self.announcements_url, params))

    def fetch_holidays(self, filters: Optional["ListingFilters"] = None) -> ListingPage:
        params = query_params(filters, include_contract_type=False)
        return _parse(ListingPage.from_dict, self.get(self.holidays_url, params))

    def fetch_detail(self, slug: str) -> ListingDetail:
        url = f"{self.announcements_url}{quote(slug, safe='')}"
        return _parse(ListingDetail.from_dict, self.get(url))


def _parse(parser: Callable[[dict], T], payload: dict) -> T:
    # A payload missing required fields counts as a bad response.
    try:
        return parser(payload)
    except (TypeError, AttributeError) as exc:
        raise ValueError(f"Malformed response payload: {exc}") from exc

def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def query_params(
    filters: Optional["ListingFilters"],
    category: Optional[Category] = None,
    include_contract_type: bool = True,
) -> List[Tuple[str, str]]:
    """Build query parameters, omitting every empty or zero value."""
    params: List[Tuple[str, str]] = []
    contract_type = category or (filters.category if filters else None)
    if include_contract_type and contract_type:
        params.append(("contract_type", Category(contract_type).value))
    if filters is None:
        return params

    if filters.place_type and filters.place_type != "all":
        params.append(("place_type", filters.place_type))
    if filters.city:
        params.append(("city", filters.city))
    if filters.zip_code:
        params.append(("zip_code", filters.zip_code))
    for name in ("price_min", "price_max", "surface_min", "surface_max"):
        value = getattr(filters, name)
        if value:
            params.append((name, _format_number(value)))
    return params
