"""estatecache package initialization."""

from .app import Application, build_application
from .cache import OfflineCache
from .client import ListingApiClient
from .config import Settings
from .connectivity import ConnectivityMonitor
from .errors import (
    EstateCacheError,
    ListingNotAvailableError,
    ListingUnavailableError,
    NotAvailableOfflineError,
    StorageError,
)
from .favorites import FavoritesRegistry
from .filters import ListingFilters, apply_filters, paginate, sort_listings
from .models import (
    CacheEntry,
    Category,
    Listing,
    ListingDetail,
    ListingPage,
    StorageResult,
)
from .service import ListingService
from .store import SQLiteStore

__all__ = [
    "Application",
    "CacheEntry",
    "Category",
    "ConnectivityMonitor",
    "EstateCacheError",
    "FavoritesRegistry",
    "Listing",
    "ListingApiClient",
    "ListingDetail",
    "ListingFilters",
    "ListingNotAvailableError",
    "ListingPage",
    "ListingService",
    "ListingUnavailableError",
    "NotAvailableOfflineError",
    "OfflineCache",
    "SQLiteStore",
    "Settings",
    "StorageError",
    "StorageResult",
    "apply_filters",
    "build_application",
    "paginate",
    "sort_listings",
]
