"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .cache import IMAGE_BASE_URL

DEFAULT_STORE_URL = "sqlite:///estate_cache.db"


@dataclass(frozen=True)
class Settings:
    api_url: str
    api_token: str = ""
    store_url: str = DEFAULT_STORE_URL
    app_host: str = ""
    image_base_url: str = IMAGE_BASE_URL
    probe_url: str = ""
    share_webhook: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        api_url = (os.getenv("API_URL") or "").strip()
        if not api_url:
            raise ValueError("API_URL must not be empty")
        return cls(
            api_url=api_url,
            api_token=(os.getenv("API_TOKEN") or "").strip(),
            store_url=os.getenv("STORE_URL", DEFAULT_STORE_URL),
            app_host=(os.getenv("APP_HOST") or "").strip(),
            image_base_url=os.getenv("IMAGE_BASE_URL", IMAGE_BASE_URL),
            probe_url=(os.getenv("PROBE_URL") or api_url).strip(),
            share_webhook=(os.getenv("SHARE_WEBHOOK") or "").strip(),
        )
