"""Network-or-cache orchestration for listing requests."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import requests

from .cache import OfflineCache
from .client import ListingApiClient
from .errors import ListingNotAvailableError, NotAvailableOfflineError
from .filters import ListingFilters, apply_filters
from .models import Category, ListingDetail, ListingPage

logger = logging.getLogger(__name__)

FETCH_ERRORS = (requests.RequestException, ValueError)


@dataclass
class ListingService:
    """Decides per request whether to hit the network or the offline cache.

    Fallback policy differs by path: the combined purchase+rental fetch
    falls back to the cache on failure, single-category and holiday fetches
    let the network error through so the caller can offer a retry.
    """

    client: ListingApiClient
    cache: OfflineCache

    def get_all(self, filters: Optional[ListingFilters] = None) -> ListingPage:
        filters = filters or ListingFilters()

        if self.cache.is_offline:
            logger.info("Offline; serving listings from cache")
            return self._from_cache(filters)

        category = Category(filters.category) if filters.category else None
        if category is Category.HOLIDAY:
            page = self.client.fetch_holidays(filters)
            self.cache.cache_listings(page.announcements, Category.HOLIDAY)
            return page

        if category is None:
            try:
                return self._get_all_combined(filters)
            except FETCH_ERRORS as exc:
                logger.warning("Combined fetch failed, falling back to cache: %s", exc)
                return self._from_cache(filters)

        return self._fetch_and_cache(filters, category)

    def _fetch_and_cache(self, filters: ListingFilters, category: Category) -> ListingPage:
        page = self.client.fetch_listings(filters, category=category)
        self.cache.cache_listings(page.announcements, category)
        return page

    def _get_all_combined(self, filters: ListingFilters) -> ListingPage:
        with ThreadPoolExecutor(max_workers=2) as pool:
            purchase_future = pool.submit(self._fetch_and_cache, filters, Category.PURCHASE)
            rental_future = pool.submit(self._fetch_and_cache, filters, Category.RENTAL)
            purchase = purchase_future.result()
            rental = rental_future.result()

        merged = apply_filters(purchase.announcements + rental.announcements, filters)
        logger.info(
            "Fetched %d purchase and %d rental listings (%d after filtering)",
            len(purchase.announcements),
            len(rental.announcements),
            len(merged),
        )
        return ListingPage(
            announcements=merged,
            total_result=len(merged),
            self_url=purchase.self_url,
            order=purchase.order,
        )

    def _from_cache(self, filters: ListingFilters) -> ListingPage:
        if filters.category:
            cached = self.cache.get_cached_listings(Category(filters.category))
        else:
            cached = self.cache.get_all_cached_listings()
        listings = apply_filters(cached, filters)
        return ListingPage(announcements=listings, total_result=len(listings))

    def get_by_slug(self, slug: str) -> ListingDetail:
        if self.cache.is_offline:
            cached = self.cache.get_cached_listing_detail(slug)
            if cached is None:
                raise NotAvailableOfflineError(slug)
            return cached

        try:
            detail = self.client.fetch_detail(slug)
        except FETCH_ERRORS as exc:
            cached = self.cache.get_cached_listing_detail(slug)
            if cached is None:
                raise ListingNotAvailableError(slug) from exc
            logger.warning("Detail fetch for %s failed; using cached copy: %s", slug, exc)
            return cached

        self.cache.cache_listing_detail(detail)
        return detail
