"""Online/offline state tracking."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

import requests

logger = logging.getLogger(__name__)

LOCAL_DEV_HOSTS = frozenset({"localhost", "127.0.0.1"})

NetworkSignal = Callable[[], bool]
EventSubscriber = Callable[[str, Callable[[], None]], None]


def probe_network(url: str, timeout: float = 5) -> bool:
    """Return True when ``url`` answers at all, whatever the status code."""
    try:
        requests.head(url, timeout=timeout, allow_redirects=False)
    except requests.RequestException as exc:
        logger.debug("Network probe to %s failed: %s", url, exc)
        return False
    return True


@dataclass
class ConnectivityMonitor:
    """Holds a single "is offline" flag, seeded once and then event driven.

    Local development hosts misreport connectivity, so they start online
    whatever the network signal says.
    """

    host: str = ""
    network_signal: NetworkSignal = field(default=lambda: True)

    def __post_init__(self) -> None:
        self._offline = False
        if self.host in LOCAL_DEV_HOSTS:
            logger.debug("Local development host %s; assuming online", self.host)
            return
        try:
            self._offline = not self.network_signal()
        except Exception:  # noqa: BLE001
            logger.exception("Network signal failed; assuming offline")
            self._offline = True

    @property
    def is_offline(self) -> bool:
        return self._offline

    def went_online(self) -> None:
        if self._offline:
            logger.info("Connectivity restored")
        self._offline = False

    def went_offline(self) -> None:
        if not self._offline:
            logger.info("Connectivity lost; serving cached data")
        self._offline = True

    def bind(self, subscribe: EventSubscriber) -> None:
        """Register transition handlers with a host event source."""
        subscribe("online", self.went_online)
        subscribe("offline", self.went_offline)
