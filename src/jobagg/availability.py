# src/jobagg/availability.py
"""
Which companies can we actually collect, and how?

Combines a static fallback registry (enterprise sites we know are blocked
or waiting for a feed) with the detected platform of each careers URL. The
orchestrator asks here before spending any network or actor budget, and
status pages read the same answers.
"""

from __future__ import annotations
import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional

import httpx

from jobagg.clients.base import Connector
from jobagg.companies import company_id as make_company_id
from jobagg.config import Settings
from jobagg.connectors import AUTOMATION_PLATFORMS, CONNECTORS, resolve_platform
from jobagg.models import Company
from jobagg.pipeline.platform import PlatformTag, fetch_and_detect

logger = logging.getLogger(__name__)


class FallbackType(str, Enum):
    OFFICIAL_FEED = "OFFICIAL_FEED"
    PARTNER_API = "PARTNER_API"
    MANUAL_ONBOARD = "MANUAL_ONBOARD"
    BLOCKED = "BLOCKED"
    BROWSER_AUTOMATION = "BROWSER_AUTOMATION"


class Availability(str, Enum):
    ACTIVE = "ACTIVE"
    BLOCKED = "BLOCKED"
    PENDING_FEED = "PENDING_FEED"
    PENDING_PARTNERSHIP = "PENDING_PARTNERSHIP"
    UNSUPPORTED = "UNSUPPORTED"


@dataclass
class FallbackConfig:
    company_id: str
    company_name: str
    fallback_type: FallbackType
    enabled: bool = True
    feed_url: Optional[str] = None
    feed_type: Optional[str] = None  # XML | JSON | RSS
    partner_name: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class CompanyStatus:
    company_id: str
    name: str
    careers_url: str
    platform: PlatformTag
    available: bool
    status: Availability
    message: str
    fallback_type: Optional[FallbackType] = None
    requires_onboarding: bool = False

    def to_dict(self) -> Dict:
        d = asdict(self)
        d["platform"] = self.platform.value
        d["status"] = self.status.value
        d["fallback_type"] = self.fallback_type.value if self.fallback_type else None
        return d


_BLOCKED_NOTE = "Enterprise Workday with max bot-protection. Requires official feed or partnership."

DEFAULT_FALLBACKS: List[FallbackConfig] = [
    FallbackConfig("lego", "LEGO", FallbackType.BLOCKED, notes=_BLOCKED_NOTE),
    FallbackConfig("ikea", "IKEA", FallbackType.BLOCKED, notes=_BLOCKED_NOTE),
    FallbackConfig("vestas", "Vestas", FallbackType.BLOCKED, notes=_BLOCKED_NOTE),
    FallbackConfig("danske-bank", "Danske Bank", FallbackType.BLOCKED, notes=_BLOCKED_NOTE),
]


@dataclass
class AvailabilityRegistry:
    settings: Settings
    fallbacks: Dict[str, FallbackConfig] = field(default_factory=lambda: {f.company_id: f for f in DEFAULT_FALLBACKS})
    connectors: Mapping[PlatformTag, Connector] = field(default_factory=lambda: dict(CONNECTORS))
    # platform answers from HTML probes, keyed by company id
    detected: Dict[str, PlatformTag] = field(default_factory=dict)

    def register(self, config: FallbackConfig) -> None:
        self.fallbacks[config.company_id] = config

    def probe(self, companies: Iterable[Company], client: httpx.Client) -> Dict[str, PlatformTag]:
        """Fetch the careers page of companies whose URL alone says nothing."""
        for company in companies:
            if resolve_platform(company) is PlatformTag.UNKNOWN:
                tag = fetch_and_detect(company.get("careers_url", ""), client)
                self.detected[company["id"]] = tag
                logger.info(f"[availability] probed {company['id']}: {tag.value}")
        return dict(self.detected)

    def status(self, company: Company) -> CompanyStatus:
        platform = resolve_platform(company, self.detected)
        fallback = self.fallbacks.get(company["id"])

        def make(available: bool, state: Availability, message: str, tag: PlatformTag = platform) -> CompanyStatus:
            return CompanyStatus(
                company_id=company["id"],
                name=company["name"],
                careers_url=company.get("careers_url", ""),
                platform=tag,
                available=available,
                status=state,
                message=message,
                fallback_type=fallback.fallback_type if fallback else None,
                requires_onboarding=(not available and fallback is not None
                                     and fallback.fallback_type is FallbackType.BLOCKED),
            )

        if fallback is not None:
            return self._fallback_status(fallback, make)

        if platform not in self.connectors:
            return make(False, Availability.UNSUPPORTED, f"No connector for platform '{platform.value}'")
        if platform in AUTOMATION_PLATFORMS and not self.settings.automation_enabled:
            return make(False, Availability.BLOCKED, "Needs the browser-automation runner (set APIFY_TOKEN)")
        if platform in AUTOMATION_PLATFORMS:
            return make(True, Availability.ACTIVE, "Jobs available via browser automation")
        return make(True, Availability.ACTIVE, f"Jobs available via the {platform.value} connector")

    def _fallback_status(self, fallback: FallbackConfig, make) -> CompanyStatus:
        if not fallback.enabled:
            return make(False, Availability.PENDING_FEED, "Onboarding in progress - awaiting feed setup")

        kind = fallback.fallback_type
        if kind is FallbackType.BLOCKED:
            return make(False, Availability.BLOCKED,
                        "This company requires an official feed or partnership. Contact support to onboard.")
        if kind is FallbackType.MANUAL_ONBOARD:
            return make(False, Availability.PENDING_FEED, "Onboarding in progress - awaiting configuration")
        if kind is FallbackType.OFFICIAL_FEED:
            return make(False, Availability.PENDING_FEED, "Official feed registered; feed ingestion not connected yet")
        if kind is FallbackType.PARTNER_API:
            partner = fallback.partner_name or "partner"
            return make(False, Availability.PENDING_PARTNERSHIP, f"Awaiting {partner} partnership integration")
        if kind is FallbackType.BROWSER_AUTOMATION:
            if self.settings.automation_enabled:
                return make(True, Availability.ACTIVE, "Jobs available via browser automation", PlatformTag.WORKDAY)
            return make(False, Availability.BLOCKED, "Needs the browser-automation runner (set APIFY_TOKEN)",
                        PlatformTag.WORKDAY)
        return make(False, Availability.BLOCKED, "Currently unavailable")

    def summary(self, companies: Iterable[Company]) -> Dict:
        statuses = [self.status(c) for c in companies]
        total = len(statuses)
        available = sum(1 for s in statuses if s.available)
        return {
            "stats": {
                "total": total,
                "available": available,
                "blocked": total - available,
                "needs_onboarding": sum(1 for s in statuses if s.requires_onboarding),
                "coverage_percentage": round(available / total * 100) if total else 0,
            },
            "companies": [s.to_dict() for s in statuses],
        }


def create_onboarding_request(
    company_name: str,
    careers_url: str,
    *,
    feed_url: Optional[str] = None,
    feed_type: Optional[str] = None,
    notes: Optional[str] = None,
) -> FallbackConfig:
    """
    A fallback entry for a company we can't scrape.

    It starts disabled; someone has to verify the feed and flip `enabled`.
    """
    config = FallbackConfig(
        company_id=make_company_id(company_name),
        company_name=company_name,
        fallback_type=FallbackType.OFFICIAL_FEED if feed_url else FallbackType.MANUAL_ONBOARD,
        enabled=False,
        feed_url=feed_url,
        feed_type=feed_type,
        notes=notes or f"Awaiting feed configuration for {careers_url}",
    )
    logger.info(f"[onboarding] created {config.fallback_type.value} request for {company_name}")
    return config
