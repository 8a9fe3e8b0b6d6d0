"""Bounded, best-effort local mirror of fetched listings."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from .connectivity import ConnectivityMonitor
from .models import CacheEntry, Category, Listing, ListingDetail
from .store import SQLiteStore

logger = logging.getLogger(__name__)

CACHE_KEYS = {
    Category.PURCHASE: "sergic_cache_achat",
    Category.RENTAL: "sergic_cache_location",
    Category.HOLIDAY: "sergic_cache_vacance",
}
DETAILS_KEY = "sergic_cache_details"
# Owned by FavoritesRegistry; only ever read here.
FAVORITES_KEY = "sergic_favorites"
LEGACY_TIMESTAMP_KEY = "sergic_cache_timestamp"

MAX_CACHED_LISTINGS = 10
MAX_CACHED_DETAILS = 30

IMAGE_BASE_URL = "https://ad-sergic-middle-prod.itroom.fr/"
OFFLINE_PLACEHOLDER = (
    'data:image/svg+xml,%3Csvg xmlns="http://www.w3.org/2000/svg" width="200" '
    'height="200" viewBox="0 0 200 200"%3E%3Crect fill="%23E5E7EB" width="200" '
    'height="200"/%3E%3Cpath fill="%239CA3AF" d="M100 60c-16.5 0-30 13.5-30 30s13.5 '
    '30 30 30 30-13.5 30-30-13.5-30-30-30zm0 50c-11 0-20-9-20-20s9-20 20-20 20 9 20 '
    '20-9 20-20 20z"/%3E%3Cpath stroke="%239CA3AF" stroke-width="4" '
    'stroke-linecap="round" stroke-linejoin="round" fill="none" d="M50 150l40-40 '
    '25 25 25-25 40 40"/%3E%3C/svg%3E'
)

TItem = TypeVar("TItem")


def _now_ms() -> int:
    return int(time.time() * 1000)


def _dedupe(items: Iterable[TItem], key_fn: Callable[[TItem], str]) -> List[TItem]:
    """Keep the first occurrence of every key, preserving order."""
    seen = set()
    result = []
    for item in items:
        key = key_fn(item)
        if key in seen:
            continue
        seen.add(key)
        result.append(item)
    return result


def parse_listings(raw: Any) -> List[Listing]:
    if not isinstance(raw, list):
        return []
    try:
        return [Listing.from_dict(item) for item in raw]
    except (TypeError, AttributeError) as exc:
        logger.debug("Discarding malformed cached listings: %s", exc)
        return []


@dataclass
class OfflineCache:
    """Category, detail and image-URL caching on top of a key-value store.

    Storage failures never leave this class: reads degrade to "no data"
    and writes are dropped with a log line.
    """

    store: SQLiteStore
    connectivity: ConnectivityMonitor
    image_base_url: str = IMAGE_BASE_URL
    clock: Callable[[], int] = field(default=_now_ms)

    def __post_init__(self) -> None:
        self._details_lock = threading.Lock()

    @property
    def is_offline(self) -> bool:
        return self.connectivity.is_offline

    # Category caches

    def cache_listings(self, listings: Iterable[Listing], category: Category) -> None:
        to_cache = list(listings)[:MAX_CACHED_LISTINGS]
        entry = CacheEntry(
            data=[listing.to_dict() for listing in to_cache],
            timestamp=self.clock(),
        )
        self._save(CACHE_KEYS[category], entry)

    def get_cached_listings(self, category: Category) -> List[Listing]:
        entry = self._load_entry(CACHE_KEYS[category])
        if entry is None:
            return []
        return parse_listings(entry.data)

    def get_all_cached_listings(self) -> List[Listing]:
        merged: List[Listing] = []
        for category in (Category.PURCHASE, Category.RENTAL, Category.HOLIDAY):
            merged.extend(self.get_cached_listings(category))
        merged.extend(self._get_cached_favorites())
        return _dedupe(merged, key_fn=lambda listing: listing.reference)

    def _get_cached_favorites(self) -> List[Listing]:
        result = self.store.read(FAVORITES_KEY)
        if not result.ok:
            logger.debug("Favorites unreadable: %s", result.error)
        return parse_listings(result.unwrap_or([]))

    # Detail cache

    def cache_listing_detail(self, detail: ListingDetail) -> None:
        with self._details_lock:
            entry = self._load_entry(DETAILS_KEY)
            details: Dict[str, Any] = {}
            if entry is not None and isinstance(entry.data, dict):
                details = entry.data

            details[detail.slug] = detail.to_dict()
            slugs = list(details)
            if len(slugs) > MAX_CACHED_DETAILS:
                for slug in slugs[: len(slugs) - MAX_CACHED_DETAILS]:
                    del details[slug]

            self._save(DETAILS_KEY, CacheEntry(data=details, timestamp=self.clock()))

    def get_cached_listing_detail(self, slug: str) -> Optional[ListingDetail]:
        entry = self._load_entry(DETAILS_KEY)
        if entry is None or not isinstance(entry.data, dict):
            return None
        raw = entry.data.get(slug)
        if not isinstance(raw, dict):
            return None
        try:
            return ListingDetail.from_dict(raw)
        except (TypeError, AttributeError) as exc:
            logger.debug("Discarding malformed cached detail %s: %s", slug, exc)
            return None

    def cached_detail_slugs(self) -> List[str]:
        entry = self._load_entry(DETAILS_KEY)
        if entry is None or not isinstance(entry.data, dict):
            return []
        return list(entry.data)

    # Status

    def has_cached_data(self) -> bool:
        return bool(
            self.get_cached_listings(Category.PURCHASE)
            or self.get_cached_listings(Category.RENTAL)
        )

    def get_cache_age(self) -> Optional[int]:
        """Minutes elapsed since the older of the purchase and rental writes."""
        timestamps = []
        for category in (Category.PURCHASE, Category.RENTAL):
            entry = self._load_entry(CACHE_KEYS[category])
            if entry is not None and entry.timestamp:
                timestamps.append(entry.timestamp)
        if not timestamps:
            return None
        return (self.clock() - min(timestamps)) // (1000 * 60)

    def clear_cache(self) -> None:
        # Holiday listings and favorites survive a clear.
        for key in (
            CACHE_KEYS[Category.PURCHASE],
            CACHE_KEYS[Category.RENTAL],
            DETAILS_KEY,
            LEGACY_TIMESTAMP_KEY,
        ):
            result = self.store.remove(key)
            if not result.ok:
                logger.error("Failed to clear cache: %s", result.error)

    # Images

    def get_image_url(self, picture_url: str) -> str:
        if self.is_offline:
            return OFFLINE_PLACEHOLDER
        if not picture_url:
            return ""
        if picture_url.startswith("http"):
            return picture_url
        return f"{self.image_base_url}{picture_url}"

    def cache_image(self, picture_url: str) -> None:
        """No-op: the image origin does not allow cross-origin reads."""

    def cache_listing_images(self, listings: Iterable[Listing]) -> None:
        """No-op, see ``cache_image``."""

    # Storage helpers

    def _load_entry(self, key: str) -> Optional[CacheEntry[Any]]:
        result = self.store.read(key)
        if not result.ok:
            logger.debug("Cache read for %s degraded to empty: %s", key, result.error)
            return None
        raw = result.value
        if not isinstance(raw, dict) or "data" not in raw:
            return None
        timestamp = raw.get("timestamp")
        return CacheEntry(
            data=raw["data"],
            timestamp=int(timestamp) if isinstance(timestamp, (int, float)) else 0,
        )

    def _save(self, key: str, entry: CacheEntry[Any]) -> None:
        result = self.store.write(key, {"data": entry.data, "timestamp": entry.timestamp})
        if not result.ok:
            logger.error("Failed to save %s to local storage: %s", key, result.error)
