"""Spreadsheet export of the compare list."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from openpyxl import Workbook

from .models import Listing

logger = logging.getLogger(__name__)

COMPARE_HEADERS = [
    "reference",
    "title",
    "city",
    "zip_code",
    "contract_type",
    "price",
    "square_meter",
    "price_per_m2",
    "number_of_beds",
    "date",
]


def price_per_square_meter(listing: Listing) -> Optional[float]:
    if not listing.square_meter:
        return None
    return round(listing.price / listing.square_meter, 2)


def export_compare_to_xlsx(listings: Iterable[Listing], path: Path) -> Path:
    """Write one row per compared listing and return the written path."""
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "compare"
    worksheet.append(COMPARE_HEADERS)

    count = 0
    for listing in listings:
        worksheet.append([
            listing.reference,
            listing.title or listing.label_type,
            listing.city,
            listing.zip_code,
            listing.contract_type,
            listing.price,
            listing.square_meter,
            price_per_square_meter(listing),
            listing.number_of_beds,
            listing.date,
        ])
        count += 1

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(path)
    logger.info("Exported %d compared listing(s) to %s", count, path)
    return path
