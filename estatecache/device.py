"""Share and haptics capabilities, invoked fire-and-forget."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import requests

from .models import Listing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShareContent:
    title: str
    text: str
    url: str


class ShareTarget(Protocol):
    """Protocol for anything able to share content on the user's behalf."""

    def share(self, content: ShareContent) -> None:
        ...


class HapticsDriver(Protocol):

    def impact(self, style: str) -> None:
        ...


@dataclass
class WebhookShareTarget:
    """Share content by posting it to a webhook."""

    webhook_url: str
    timeout: int = 10

    def share(self, content: ShareContent) -> None:
        response = requests.post(
            self.webhook_url,
            json={"title": content.title, "text": content.text, "url": content.url},
            timeout=self.timeout,
        )
        response.raise_for_status()


@dataclass
class DeviceBridge:
    """Forwards to whichever capabilities the host provides.

    A missing capability or a failing one is logged and ignored.
    """

    share_target: ShareTarget | None = None
    haptics: HapticsDriver | None = None

    def share(self, content: ShareContent) -> None:
        if self.share_target is None:
            logger.debug("Share capability unavailable; dropping %r", content.title)
            return
        try:
            self.share_target.share(content)
        except Exception:  # noqa: BLE001
            logger.exception("Failed to share via %s", type(self.share_target).__name__)

    def haptic_feedback(self, style: str = "light") -> None:
        if self.haptics is None:
            return
        try:
            self.haptics.impact(style)
        except Exception:  # noqa: BLE001
            logger.debug("Haptic feedback failed", exc_info=True)


def _format_price(price: float) -> str:
    # French grouping: narrow no-break space between thousands.
    return f"{price:,.0f}".replace(",", "\u202f")


def format_share_content(listing: Listing, url: str) -> ShareContent:
    """Render the share sheet payload for a listing."""
    heading = listing.title or listing.label_type
    return ShareContent(
        title=f"Annonce immobilière : {heading}",
        text=f"Découvrez cette annonce : {heading} - {_format_price(listing.price)} € - {listing.city}",
        url=url,
    )
