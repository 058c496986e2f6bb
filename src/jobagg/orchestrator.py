# src/jobagg/orchestrator.py
"""
Fan the connectors out over all companies and merge what comes back.

Each company runs on its own worker with its own HTTP client. Whatever
happens inside one company's call (error result, exception, timeout) is
turned into a `CompanyError` and never stops the rest of the batch.
"""

from __future__ import annotations
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

import httpx

from jobagg.availability import AvailabilityRegistry, CompanyStatus
from jobagg.clients.base import ConnectorResult
from jobagg.clients.http import make_client
from jobagg.config import Settings
from jobagg.errors import AutomationRunError, AutomationTimeoutError, ConfigurationError, ConnectorError
from jobagg.models import Company, NormalizedJob

logger = logging.getLogger(__name__)

HttpFactory = Callable[[], httpx.Client]


@dataclass
class CompanyError:
    company_id: str
    company_name: str
    kind: str  # connector | automation | configuration | timeout | unexpected
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"company_id": self.company_id, "company_name": self.company_name,
                "kind": self.kind, "message": self.message}


@dataclass
class CompanyOutcome:
    company: Company
    platform: str
    result: Optional[ConnectorResult] = None
    error: Optional[CompanyError] = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def jobs(self) -> List[NormalizedJob]:
        return self.result.jobs if self.result else []


@dataclass
class AggregationResult:
    jobs: List[NormalizedJob] = field(default_factory=list)
    outcomes: List[CompanyOutcome] = field(default_factory=list)
    errors: List[CompanyError] = field(default_factory=list)
    skipped: List[CompanyStatus] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def attempted(self) -> int:
        return len(self.outcomes)


def classify_error(company: Company, exc: BaseException) -> CompanyError:
    if isinstance(exc, AutomationTimeoutError):
        kind = "timeout"
    elif isinstance(exc, AutomationRunError):
        kind = "automation"
    elif isinstance(exc, ConfigurationError):
        kind = "configuration"
    elif isinstance(exc, ConnectorError):
        kind = "connector"
    else:
        kind = "unexpected"
    return CompanyError(company["id"], company["name"], kind, str(exc) or exc.__class__.__name__)


class Orchestrator:
    def __init__(
        self,
        settings: Settings,
        registry: AvailabilityRegistry,
        *,
        http_factory: Optional[HttpFactory] = None,
    ):
        self.settings = settings
        self.registry = registry
        self.http_factory = http_factory or (lambda: make_client(settings.http_timeout_s))

    def run_company(self, company: Company, status: CompanyStatus) -> CompanyOutcome:
        """One company, fully isolated: never raises."""
        start = time.monotonic()
        outcome = CompanyOutcome(company=company, platform=status.platform.value)
        connector = self.registry.connectors.get(status.platform)
        try:
            if connector is None:
                raise ConnectorError(status.platform.value, "no connector registered")
            with self.http_factory() as client:
                result = connector(company, client, self.settings)
            outcome.result = result
            if result.error is not None:
                outcome.error = classify_error(company, result.error)
        except Exception as e:
            logger.warning(f"[orchestrator] {company['id']} failed: {e}", exc_info=not isinstance(e, ConnectorError))
            outcome.error = classify_error(company, e)
        outcome.duration_ms = int((time.monotonic() - start) * 1000)
        return outcome

    def aggregate(self, companies: Iterable[Company]) -> AggregationResult:
        start = time.monotonic()
        result = AggregationResult()

        runnable: List[tuple] = []
        for company in companies:
            status = self.registry.status(company)
            if status.available:
                runnable.append((company, status))
            else:
                logger.info(f"[orchestrator] skipping {company['id']}: {status.message}")
                result.skipped.append(status)

        if runnable:
            logger.info(f"[orchestrator] aggregating {len(runnable)} companies "
                        f"(max_workers={self.settings.max_workers})")
            pool = ThreadPoolExecutor(max_workers=self.settings.max_workers, thread_name_prefix="jobagg")
            futures: Dict[Future, tuple] = {
                pool.submit(self.run_company, company, status): (company, status)
                for company, status in runnable
            }
            done, pending = wait(futures, timeout=self.settings.batch_timeout_s)
            # don't block on stragglers; they finish (or not) in the background
            pool.shutdown(wait=False, cancel_futures=True)

            outcomes: Dict[str, CompanyOutcome] = {}
            for fut in done:
                company, status = futures[fut]
                outcomes[company["id"]] = fut.result()
            for fut in pending:
                company, status = futures[fut]
                err = CompanyError(company["id"], company["name"], "timeout",
                                   f"no result within the {self.settings.batch_timeout_s:g}s batch timeout")
                outcomes[company["id"]] = CompanyOutcome(company=company, platform=status.platform.value, error=err)

            # keep configured company order so one run is stable; first sighting of an id wins
            seen = set()
            for company, _ in runnable:
                outcome = outcomes[company["id"]]
                result.outcomes.append(outcome)
                for job in outcome.jobs:
                    if job["canonical_job_id"] not in seen:
                        seen.add(job["canonical_job_id"])
                        result.jobs.append(job)
                if outcome.error is not None:
                    result.errors.append(outcome.error)

        result.duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(f"[orchestrator] {len(result.jobs)} jobs, {len(result.errors)} errors, "
                    f"{len(result.skipped)} skipped in {result.duration_ms}ms")
        return result
