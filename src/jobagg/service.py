# src/jobagg/service.py
"""
The surface the rest of the app talks to.

One `JobService` per process owns the freshness cache, the job store, the
availability registry and the company list. Read path: `get_jobs` (cached
aggregate, filtered). Write path: `ingest` (lifecycle upsert into the
store).
"""

from __future__ import annotations
import datetime as dt
import logging
import threading
import time
from typing import Callable, Dict, List, Optional, Sequence

from jobagg.availability import AvailabilityRegistry
from jobagg.cache import CacheSnapshot, FreshnessCache
from jobagg.clients.adzuna import search_market_jobs
from jobagg.companies import COMPANIES, get_company
from jobagg.config import Settings, load_settings
from jobagg.errors import AggregationFailedError
from jobagg.ingest import IngestionReport, ingest
from jobagg.models import Company, NormalizedJob
from jobagg.orchestrator import HttpFactory, Orchestrator
from jobagg.pipeline.filter import filter_jobs
from jobagg.store import JobStore

logger = logging.getLogger(__name__)


def _iso(epoch_s: float) -> str:
    return dt.datetime.fromtimestamp(epoch_s, dt.timezone.utc).isoformat(timespec="seconds")


class JobService:
    def __init__(
        self,
        settings: Settings,
        companies: Sequence[Company],
        registry: AvailabilityRegistry,
        orchestrator: Orchestrator,
        cache: FreshnessCache,
        store: JobStore,
    ):
        self.settings = settings
        self.companies = list(companies)
        self.registry = registry
        self.orchestrator = orchestrator
        self.cache = cache
        self.store = store
        # one refresh at a time; the second caller reuses the first one's snapshot
        self._refresh_lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        companies: Optional[Sequence[Company]] = None,
        registry: Optional[AvailabilityRegistry] = None,
        http_factory: Optional[HttpFactory] = None,
        clock: Callable[[], float] = time.time,
    ) -> "JobService":
        settings = settings or load_settings()
        registry = registry or AvailabilityRegistry(settings)
        return cls(
            settings=settings,
            companies=COMPANIES if companies is None else companies,
            registry=registry,
            orchestrator=Orchestrator(settings, registry, http_factory=http_factory),
            cache=FreshnessCache(settings.cache_ttl_s, clock=clock),
            store=JobStore(),
        )

    # ---- read path ----

    def _snapshot(self, recrawl: bool) -> tuple:
        """(snapshot or None, served_from_cache, errors)"""
        if not recrawl and self.cache.is_valid():
            return self.cache.get(), True, []

        with self._refresh_lock:
            if not recrawl and self.cache.is_valid():
                return self.cache.get(), True, []

            result = self.orchestrator.aggregate(self.companies)
            errors = [e.to_dict() for e in result.errors]
            if result.jobs:
                return self.cache.put(result.jobs), False, errors

            stale = self.cache.get()
            if stale is not None:
                logger.warning(f"[service] fresh aggregation empty; serving snapshot from {_iso(stale.captured_at)}")
                return stale, True, errors
            if result.attempted and len(result.errors) == result.attempted:
                raise AggregationFailedError(
                    f"all {result.attempted} companies failed and there is no cached data: "
                    + "; ".join(f"{e.company_id}: {e.message}" for e in result.errors)
                )
            return None, False, errors

    def get_jobs(
        self,
        company: Optional[str] = None,
        country: Optional[str] = None,
        query: Optional[str] = None,
        recrawl: bool = False,
    ) -> Dict:
        snapshot, cached, errors = self._snapshot(recrawl)
        jobs = [dict(j) for j in snapshot.jobs] if snapshot is not None else []
        jobs = filter_jobs(jobs, company=company, country=country, query=query)
        return {
            "jobs": jobs,
            "total": len(jobs),
            "cached": cached,
            "cache_timestamp": _iso(snapshot.captured_at) if snapshot is not None else None,
            "errors": errors,
        }

    def jobs_for_matching(self) -> List[NormalizedJob]:
        """Everything we currently know about, for the AI job-match feature."""
        snapshot, _, _ = self._snapshot(recrawl=False)
        return [dict(j) for j in snapshot.jobs] if snapshot is not None else []

    def cached_snapshot(self) -> Optional[CacheSnapshot]:
        return self.cache.get()

    def company_status(self) -> Dict:
        return self.registry.summary(self.companies)

    # ---- write path ----

    def ingest(self, company_id: Optional[str] = None) -> IngestionReport:
        if company_id is None:
            companies = self.companies
        else:
            company = get_company(company_id, self.companies)
            if company is None:
                raise ValueError(f"Unknown company {company_id!r}")
            companies = [company]
        return ingest(companies, self.store, self.orchestrator)

    def stats(self, company_id: Optional[str] = None) -> Dict:
        return self.store.stats(company_id)

    # ---- market search ----

    def search_market(
        self,
        query: str,
        country: str = "gb",
        *,
        max_pages: int = 1,
        results_per_page: int = 50,
        where: Optional[str] = None,
    ) -> List[NormalizedJob]:
        with self.orchestrator.http_factory() as client:
            return search_market_jobs(
                client, self.settings, query,
                country=country, max_pages=max_pages, results_per_page=results_per_page, where=where,
            )
