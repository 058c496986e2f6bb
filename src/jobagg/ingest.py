# src/jobagg/ingest.py
"""
Lifecycle ingestion: aggregate, then upsert and deactivate per company.

Only companies whose pass completed cleanly get `mark_missing_inactive`;
a failed crawl says nothing about which jobs were removed.
"""

from __future__ import annotations
import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List

from jobagg.models import Company
from jobagg.orchestrator import CompanyOutcome, Orchestrator
from jobagg.store import JobStore

logger = logging.getLogger(__name__)


@dataclass
class IngestionMetrics:
    company_id: str
    company_name: str
    items_fetched: int = 0
    items_normalized: int = 0
    items_inserted: int = 0
    items_updated: int = 0
    items_unchanged: int = 0
    items_failed: int = 0
    items_deactivated: int = 0
    by_country: Dict[str, int] = field(default_factory=dict)
    duration_ms: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class IngestionReport:
    companies: List[IngestionMetrics] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    duration_ms: int = 0

    def totals(self) -> Dict[str, int]:
        keys = ("items_fetched", "items_normalized", "items_inserted", "items_updated",
                "items_unchanged", "items_failed", "items_deactivated")
        return {k: sum(getattr(m, k) for m in self.companies) for k in keys}

    def to_dict(self) -> Dict:
        return {
            "totals": self.totals(),
            "companies": [asdict(m) for m in self.companies],
            "skipped": self.skipped,
            "duration_ms": self.duration_ms,
        }


def _store_outcome(outcome: CompanyOutcome, store: JobStore) -> IngestionMetrics:
    company = outcome.company
    metrics = IngestionMetrics(company["id"], company["name"], duration_ms=outcome.duration_ms)
    if outcome.result is not None:
        metrics.items_fetched = outcome.result.items_fetched
        metrics.items_failed = outcome.result.normalization_failures

    if outcome.error is not None:
        metrics.errors.append(f"{outcome.error.kind}: {outcome.error.message}")
        return metrics

    jobs = outcome.jobs
    metrics.items_normalized = len(jobs)
    for j in jobs:
        metrics.by_country[j["primary_country"]] = metrics.by_country.get(j["primary_country"], 0) + 1

    with store.company_lock(company["id"]):
        upserted = store.upsert(jobs)
        metrics.items_deactivated = store.mark_missing_inactive(
            company["id"], (j["canonical_job_id"] for j in jobs)
        )
    metrics.items_inserted = upserted.inserted
    metrics.items_updated = upserted.updated
    metrics.items_unchanged = upserted.unchanged
    metrics.items_failed += upserted.failed
    return metrics


def ingest(companies: Iterable[Company], store: JobStore, orchestrator: Orchestrator) -> IngestionReport:
    start = time.monotonic()
    aggregated = orchestrator.aggregate(companies)
    report = IngestionReport(skipped=[s.company_id for s in aggregated.skipped])

    for outcome in aggregated.outcomes:
        metrics = _store_outcome(outcome, store)
        report.companies.append(metrics)
        logger.info(
            f"[ingest] {metrics.company_id}: fetched={metrics.items_fetched} "
            f"inserted={metrics.items_inserted} updated={metrics.items_updated} "
            f"unchanged={metrics.items_unchanged} failed={metrics.items_failed} "
            f"deactivated={metrics.items_deactivated}"
            + (f" errors={metrics.errors}" if metrics.errors else "")
        )

    report.duration_ms = int((time.monotonic() - start) * 1000)
    return report
