"""Application root: builds one instance of every service and wires them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from .cache import OfflineCache
from .client import ListingApiClient
from .config import Settings
from .connectivity import ConnectivityMonitor, probe_network
from .device import DeviceBridge, WebhookShareTarget
from .favorites import FavoritesRegistry
from .geocoding import GeocodingClient
from .service import ListingService
from .store import SQLiteStore, resolve_sqlite_path

logger = logging.getLogger(__name__)


@dataclass
class Application:
    settings: Settings
    store: SQLiteStore
    connectivity: ConnectivityMonitor
    cache: OfflineCache
    client: ListingApiClient
    listings: ListingService
    favorites: FavoritesRegistry
    geocoder: GeocodingClient
    device: DeviceBridge

    def close(self) -> None:
        self.favorites.close()
        self.client.session.close()


def build_application(
    settings: Settings,
    network_signal: Callable[[], bool] | None = None,
) -> Application:
    """Construct the service graph for ``settings``.

    ``network_signal`` seeds the connectivity monitor; by default the probe
    URL is contacted once.
    """
    store = SQLiteStore(path=resolve_sqlite_path(settings.store_url))
    logger.info("Initializing local store at %s", store.path)
    store.initialize()

    if network_signal is None:
        probe_url = settings.probe_url or settings.api_url
        network_signal = lambda: probe_network(probe_url)  # noqa: E731
    connectivity = ConnectivityMonitor(host=settings.app_host, network_signal=network_signal)

    cache = OfflineCache(
        store=store,
        connectivity=connectivity,
        image_base_url=settings.image_base_url,
    )
    client = ListingApiClient(api_url=settings.api_url, api_token=settings.api_token)
    listings = ListingService(client=client, cache=cache)
    favorites = FavoritesRegistry(store=store, detail_fetcher=listings.get_by_slug)

    share_target = None
    if settings.share_webhook:
        share_target = WebhookShareTarget(webhook_url=settings.share_webhook)

    return Application(
        settings=settings,
        store=store,
        connectivity=connectivity,
        cache=cache,
        client=client,
        listings=listings,
        favorites=favorites,
        geocoder=GeocodingClient(),
        device=DeviceBridge(share_target=share_target),
    )
