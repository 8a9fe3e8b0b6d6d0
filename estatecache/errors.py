"""Exception types shared across estatecache."""

from __future__ import annotations


class EstateCacheError(Exception):
    """Base class for estatecache errors."""

    user_message = "Une erreur est survenue"


class StorageError(EstateCacheError):
    """A local storage read or write could not be completed.

    Carried inside ``StorageResult``; the cache layer maps it to a default
    value and never lets it escape.
    """

    user_message = "Stockage local indisponible"

    def __init__(self, key: str, reason: str):
        super().__init__(f"{key}: {reason}")
        self.key = key
        self.reason = reason


class ListingUnavailableError(EstateCacheError):
    """A listing detail could be served neither from the network nor the cache."""

    user_message = "Impossible de charger les détails de l'annonce"

    def __init__(self, slug: str):
        super().__init__(slug)
        self.slug = slug


class NotAvailableOfflineError(ListingUnavailableError):
    """Offline and the requested detail was never cached."""

    user_message = "Annonce non disponible hors ligne"


class ListingNotAvailableError(ListingUnavailableError):
    """Online fetch failed and no cached copy exists."""

    user_message = "Annonce non disponible"


LISTINGS_LOAD_FAILED = "Impossible de charger les annonces"
