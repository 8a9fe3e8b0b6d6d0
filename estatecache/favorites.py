"""Persisted favorites and compare lists."""

from __future__ import annotations

import logging
import re
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from .cache import FAVORITES_KEY, parse_listings
from .models import Listing, ListingDetail
from .store import SQLiteStore

logger = logging.getLogger(__name__)

COMPARE_KEY = "sergic_compare"
MAX_COMPARE = 3

_ROOMS_LABEL = re.compile(r"T(\d+)", re.IGNORECASE)

DetailFetcher = Callable[[str], ListingDetail]


def rooms_from_label(label_type: str | None) -> Optional[int]:
    """Derive a room count from labels such as "T3" or "Studio"."""
    if not label_type:
        return None
    match = _ROOMS_LABEL.search(label_type)
    if match:
        return int(match.group(1))
    if "studio" in label_type.lower():
        return 1
    return None


class FavoritesRegistry:
    """Favorites (unbounded) and compare (capped) lists keyed by reference.

    Adding a listing that has no title yet is a two-phase write: the listing
    is stored as-is, then a background task fetches its detail and merges
    the title and room count into whatever entry still carries that
    reference.
    """

    def __init__(self,
                 store: SQLiteStore,
                 detail_fetcher: DetailFetcher | None = None,
                 executor: Executor | None = None):
        self.store = store
        self.detail_fetcher = detail_fetcher
        self._executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="enrichment")
        self._lock = threading.Lock()
        self._pending: List[Future] = []
        self._lists: Dict[str, List[Listing]] = {
            FAVORITES_KEY: self._load(FAVORITES_KEY),
            COMPARE_KEY: self._load(COMPARE_KEY),
        }

    @property
    def favorites(self) -> List[Listing]:
        with self._lock:
            return list(self._lists[FAVORITES_KEY])

    @property
    def compare_list(self) -> List[Listing]:
        with self._lock:
            return list(self._lists[COMPARE_KEY])

    @property
    def favorites_count(self) -> int:
        return len(self.favorites)

    @property
    def compare_count(self) -> int:
        return len(self.compare_list)

    @property
    def can_add_to_compare(self) -> bool:
        return self.compare_count < MAX_COMPARE

    # Favorites

    def is_favorite(self, reference: str) -> bool:
        return self._contains(FAVORITES_KEY, reference)

    def toggle_favorite(self, listing: Listing) -> bool:
        """Add or remove ``listing``; returns True when it is now a favorite."""
        with self._lock:
            if self._index_of(FAVORITES_KEY, listing.reference) is not None:
                self._remove_locked(FAVORITES_KEY, listing.reference)
                return False
            self._append_locked(FAVORITES_KEY, listing)
        self._schedule_enrichment(listing, FAVORITES_KEY)
        return True

    def add_favorite(self, listing: Listing) -> None:
        with self._lock:
            if self._index_of(FAVORITES_KEY, listing.reference) is not None:
                return
            self._append_locked(FAVORITES_KEY, listing)
        self._schedule_enrichment(listing, FAVORITES_KEY)

    def remove_favorite(self, reference: str) -> None:
        with self._lock:
            self._remove_locked(FAVORITES_KEY, reference)

    def clear_favorites(self) -> None:
        with self._lock:
            self._lists[FAVORITES_KEY] = []
            self._save(FAVORITES_KEY)

    # Compare

    def is_in_compare(self, reference: str) -> bool:
        return self._contains(COMPARE_KEY, reference)

    def toggle_compare(self, listing: Listing) -> bool:
        """Add or remove ``listing``; False when removed or the list is full."""
        with self._lock:
            if self._index_of(COMPARE_KEY, listing.reference) is not None:
                self._remove_locked(COMPARE_KEY, listing.reference)
                return False
            if len(self._lists[COMPARE_KEY]) >= MAX_COMPARE:
                return False
            self._append_locked(COMPARE_KEY, listing)
        self._schedule_enrichment(listing, COMPARE_KEY)
        return True

    def add_to_compare(self, listing: Listing) -> bool:
        with self._lock:
            if len(self._lists[COMPARE_KEY]) >= MAX_COMPARE:
                return False
            if self._index_of(COMPARE_KEY, listing.reference) is not None:
                return False
            self._append_locked(COMPARE_KEY, listing)
        self._schedule_enrichment(listing, COMPARE_KEY)
        return True

    def remove_from_compare(self, reference: str) -> None:
        with self._lock:
            self._remove_locked(COMPARE_KEY, reference)

    def clear_compare(self) -> None:
        with self._lock:
            self._lists[COMPARE_KEY] = []
            self._save(COMPARE_KEY)

    # Enrichment

    def wait_for_enrichment(self, timeout: float | None = None) -> None:
        """Block until every enrichment scheduled so far has finished."""
        with self._lock:
            pending, self._pending = self._pending, []
        if pending:
            wait(pending, timeout=timeout)

    def close(self) -> None:
        self.wait_for_enrichment()
        self._executor.shutdown(wait=True)

    def _schedule_enrichment(self, listing: Listing, key: str) -> Optional[Future]:
        if listing.title or self.detail_fetcher is None:
            return None
        future = self._executor.submit(self._enrich, listing, key)
        with self._lock:
            self._pending.append(future)
        return future

    def _enrich(self, listing: Listing, key: str) -> None:
        try:
            detail = self.detail_fetcher(listing.slug)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to enrich %s: %s", listing.reference, exc)
            rooms = rooms_from_label(listing.label_type)
            if rooms is not None:
                self._reconcile(key, listing.reference, number_of_beds=rooms)
            return

        rooms = listing.number_of_beds
        if rooms is None:
            rooms = rooms_from_label(listing.label_type)
            if rooms is None:
                rooms = detail.number_of_beds
        self._reconcile(key, listing.reference, title=detail.title, number_of_beds=rooms)

    def _reconcile(self, key: str, reference: str, **updates: Any) -> bool:
        """Merge ``updates`` into the entry for ``reference`` if it is still listed."""
        with self._lock:
            index = self._index_of(key, reference)
            if index is None:
                logger.debug("%s left %s before enrichment landed", reference, key)
                return False
            items = self._lists[key]
            items[index] = replace(items[index], **updates)
            self._save(key)
            return True

    # Storage helpers

    def _contains(self, key: str, reference: str) -> bool:
        with self._lock:
            return self._index_of(key, reference) is not None

    def _index_of(self, key: str, reference: str) -> Optional[int]:
        for index, item in enumerate(self._lists[key]):
            if item.reference == reference:
                return index
        return None

    def _append_locked(self, key: str, listing: Listing) -> None:
        self._lists[key] = self._lists[key] + [listing]
        self._save(key)

    def _remove_locked(self, key: str, reference: str) -> None:
        self._lists[key] = [
            item for item in self._lists[key] if item.reference != reference
        ]
        self._save(key)

    def _load(self, key: str) -> List[Listing]:
        result = self.store.read(key)
        if not result.ok:
            logger.debug("Could not load %s: %s", key, result.error)
        return parse_listings(result.unwrap_or([]))

    def _save(self, key: str) -> None:
        result = self.store.write(key, [item.to_dict() for item in self._lists[key]])
        if not result.ok:
            logger.error("Failed to save %s to local storage: %s", key, result.error)
