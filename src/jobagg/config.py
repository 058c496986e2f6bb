# src/jobagg/config.py
"""
Runtime settings read from environment variables.

The CLI calls `load_dotenv()` first, so a `.env` file in the project root
works the same as exported variables.
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_ACTOR_ID = "pulse_automation~workday-job-scraper-fast-edition"
DEFAULT_APIFY_BASE_URL = "https://api.apify.com/v2"


def _float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    # Browser-automation runner (Workday fallback)
    apify_token: Optional[str] = None
    apify_actor_id: str = DEFAULT_ACTOR_ID
    apify_base_url: str = DEFAULT_APIFY_BASE_URL
    apify_timeout_s: float = 1200.0
    apify_poll_interval_s: float = 5.0
    apify_max_items: int = 1000

    # Serving / fan-out
    cache_ttl_s: float = 300.0
    max_workers: int = 4
    batch_timeout_s: float = 1500.0
    http_timeout_s: float = 20.0

    # Search-backed market source
    adzuna_app_id: Optional[str] = None
    adzuna_app_key: Optional[str] = None

    log_level: str = "INFO"

    @property
    def automation_enabled(self) -> bool:
        return bool(self.apify_token)


def load_settings() -> Settings:
    """Build `Settings` from the current environment."""
    return Settings(
        apify_token=os.getenv("APIFY_TOKEN") or os.getenv("APIFY_API_KEY") or None,
        apify_actor_id=os.getenv("APIFY_ACTOR_ID") or DEFAULT_ACTOR_ID,
        apify_base_url=(os.getenv("APIFY_BASE_URL") or DEFAULT_APIFY_BASE_URL).rstrip("/"),
        apify_timeout_s=_float("APIFY_TIMEOUT_S", 1200.0),
        apify_poll_interval_s=_float("APIFY_POLL_INTERVAL_S", 5.0),
        apify_max_items=_int("APIFY_MAX_ITEMS", 1000),
        cache_ttl_s=_float("JOBAGG_CACHE_TTL_S", 300.0),
        max_workers=max(1, _int("JOBAGG_MAX_WORKERS", 4)),
        batch_timeout_s=_float("JOBAGG_BATCH_TIMEOUT_S", 1500.0),
        http_timeout_s=_float("JOBAGG_HTTP_TIMEOUT_S", 20.0),
        adzuna_app_id=os.getenv("ADZUNA_APP_ID") or None,
        adzuna_app_key=os.getenv("ADZUNA_APP_KEY") or None,
        log_level=(os.getenv("JOBAGG_LOG_LEVEL") or "INFO").upper(),
    )
