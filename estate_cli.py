"""CLI entrypoint for estatecache."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from estatecache.app import Application, build_application
from estatecache.config import Settings
from estatecache.errors import LISTINGS_LOAD_FAILED, ListingUnavailableError
from estatecache.export import export_compare_to_xlsx
from estatecache.filters import (
    SORT_ORDERS,
    ListingFilters,
    apply_filters,
    matches_query,
    paginate,
    resolve_search_center,
    sort_listings,
)
from estatecache.models import Category, Listing

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Real-estate listings with an offline cache")
    parser.add_argument("--list", action="store_true", help="list announcements")
    parser.add_argument(
        "--category",
        choices=[category.value for category in Category],
        help="restrict to one contract category (default: purchase and rental)",
    )
    parser.add_argument("--place-type", help="property type, 'all' for any")
    parser.add_argument("--city", help="city name (substring match)")
    parser.add_argument("--zip-code", help="postal code prefix")
    parser.add_argument("--near", help="centre a radius search on this city or postcode")
    parser.add_argument("--radius", type=float, default=10, help="search radius in km")
    parser.add_argument("--price-min", type=float)
    parser.add_argument("--price-max", type=float)
    parser.add_argument("--surface-min", type=float)
    parser.add_argument("--surface-max", type=float)
    parser.add_argument("--rooms-min", type=int)
    parser.add_argument("--rooms-max", type=int)
    parser.add_argument("--sort", choices=SORT_ORDERS, default="recent")
    parser.add_argument("--limit", type=int, default=12, help="number of listings to show")
    parser.add_argument("--detail", metavar="SLUG", help="show one announcement")
    parser.add_argument("--favorite", metavar="REF", help="toggle a cached listing as favorite")
    parser.add_argument("--compare", metavar="REF", help="toggle a cached listing in the compare list")
    parser.add_argument("--export-compare", metavar="PATH", help="write the compare list to an xlsx file")
    parser.add_argument("--cache-status", action="store_true", help="report what is cached")
    parser.add_argument("--clear-cache", action="store_true", help="drop cached purchase/rental/detail data")
    parser.add_argument("--offline", action="store_true", help="act as if the network were down")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    return parser


def _filters_from_args(args: argparse.Namespace) -> ListingFilters:
    return ListingFilters(
        category=Category(args.category) if args.category else None,
        place_type=args.place_type,
        city=args.city,
        zip_code=args.zip_code,
        price_min=args.price_min,
        price_max=args.price_max,
        surface_min=args.surface_min,
        surface_max=args.surface_max,
        rooms_min=args.rooms_min,
        rooms_max=args.rooms_max,
        radius_km=args.radius,
    )


def _find_cached(app: Application, reference: str) -> Listing | None:
    for listing in app.cache.get_all_cached_listings():
        if listing.reference == reference:
            return listing
    return None


def _log_listing(listing: Listing) -> None:
    logger.info(
        "%s | %s | %s %s | %s € | %s m² | %s pièce(s) | %s",
        listing.reference,
        listing.title or listing.label_type or "N/A",
        listing.zip_code or "",
        listing.city or "N/A",
        listing.price,
        listing.square_meter,
        listing.number_of_beds if listing.number_of_beds is not None else "N/A",
        listing.slug,
    )


def run_list(app: Application, args: argparse.Namespace) -> int:
    filters = _filters_from_args(args)
    try:
        page = app.listings.get_all(filters)
    except Exception:  # noqa: BLE001
        logger.exception(LISTINGS_LOAD_FAILED)
        return 1

    listings = page.announcements
    if args.near:
        center = resolve_search_center(args.near, listings, app.geocoder)
        if center is not None:
            listings = apply_filters(listings, ListingFilters(center=center, radius_km=args.radius))
        else:
            listings = [listing for listing in listings if matches_query(listing, args.near)]
    visible, has_more = paginate(sort_listings(listings, args.sort), args.limit)
    logger.info("%d result(s)%s", len(listings), " (offline)" if app.cache.is_offline else "")
    for listing in visible:
        _log_listing(listing)
    if has_more:
        logger.info("...and %d more", len(listings) - len(visible))
    return 0


def run_detail(app: Application, slug: str) -> int:
    try:
        detail = app.listings.get_by_slug(slug)
    except ListingUnavailableError as exc:
        logger.error("%s (%s)", exc.user_message, exc.slug)
        return 1

    _log_listing(detail)
    description = detail.description_text()
    if description:
        logger.info("Description: %s", description)
    if detail.dpe and detail.dpe.letter_dpe:
        logger.info("DPE: %s / GES: %s", detail.dpe.letter_dpe, detail.dpe.letter_ges or "N/A")
    for picture in detail.extra_pictures() or detail.pictures or [detail.picture]:
        logger.info("Image: %s", app.cache.get_image_url(picture))
    return 0


def run_toggle_favorite(app: Application, reference: str) -> int:
    listing = _find_cached(app, reference)
    if listing is None:
        logger.error("Listing %s is not cached; list it first", reference)
        return 1
    added = app.favorites.toggle_favorite(listing)
    logger.info("%s %s favorites", reference, "added to" if added else "removed from")
    return 0


def run_toggle_compare(app: Application, reference: str) -> int:
    listing = _find_cached(app, reference)
    if listing is None:
        logger.error("Listing %s is not cached; list it first", reference)
        return 1
    if app.favorites.is_in_compare(reference):
        app.favorites.toggle_compare(listing)
        logger.info("%s removed from compare list", reference)
        return 0
    if not app.favorites.can_add_to_compare:
        logger.error("Compare list is full (%d listings); remove one first",
                     app.favorites.compare_count)
        return 1
    app.favorites.toggle_compare(listing)
    logger.info("%s added to compare list", reference)
    return 0


def run_cache_status(app: Application) -> int:
    age = app.cache.get_cache_age()
    logger.info(
        "Cached: %d purchase, %d rental, %d holiday, %d detail(s); age: %s",
        len(app.cache.get_cached_listings(Category.PURCHASE)),
        len(app.cache.get_cached_listings(Category.RENTAL)),
        len(app.cache.get_cached_listings(Category.HOLIDAY)),
        len(app.cache.cached_detail_slugs()),
        f"{age} min" if age is not None else "N/A",
    )
    logger.info(
        "Favorites: %d, compare: %d", app.favorites.favorites_count, app.favorites.compare_count
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    settings = Settings.from_env()
    network_signal = (lambda: False) if args.offline else None
    app = build_application(settings, network_signal=network_signal)
    if args.offline:
        app.connectivity.went_offline()

    try:
        if args.clear_cache:
            app.cache.clear_cache()
            logger.info("Cache cleared")
        if args.favorite or args.compare:
            status = 0
            if args.favorite:
                status |= run_toggle_favorite(app, args.favorite)
            if args.compare:
                status |= run_toggle_compare(app, args.compare)
            app.favorites.wait_for_enrichment(timeout=30)
            if status:
                return status
        if args.export_compare:
            export_compare_to_xlsx(app.favorites.compare_list, Path(args.export_compare))
        if args.cache_status:
            return run_cache_status(app)
        if args.detail:
            return run_detail(app, args.detail)
        if args.list:
            return run_list(app, args)
        if not (args.clear_cache or args.favorite or args.compare or args.export_compare):
            parser.print_help()
            return 1
        return 0
    finally:
        app.close()


if __name__ == "__main__":
    sys.exit(main())
