# src/jobagg/store.py
"""
In-memory job store keyed by `canonical_job_id`.

Lifecycle:
- first sighting           -> inserted, active
- seen again, fields drift -> updated
- seen again, same fields  -> unchanged (last_seen_at refreshed)
- absent after a complete pass for its company -> is_active = False

Records are never deleted. Swap this class for a durable backend with the
same methods; nothing else needs to change.
"""

from __future__ import annotations
import datetime as dt
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, asdict
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from jobagg.models import MUTABLE_FIELDS, JobRecord, NormalizedJob
from jobagg.pipeline.normalize import validate_job

logger = logging.getLogger(__name__)


def utc_now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds")


@dataclass
class UpsertResult:
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class JobStore:
    def __init__(self, clock: Callable[[], str] = utc_now):
        self._clock = clock
        self._jobs: Dict[str, JobRecord] = {}
        self._lock = threading.RLock()
        self._company_locks: Dict[str, threading.Lock] = {}

    @contextmanager
    def company_lock(self, company_id: str) -> Iterator[None]:
        """Hold for the whole upsert-then-deactivate sequence of one company."""
        with self._lock:
            lock = self._company_locks.setdefault(company_id, threading.Lock())
        with lock:
            yield

    def upsert(self, jobs: Iterable[NormalizedJob]) -> UpsertResult:
        result = UpsertResult()
        now = self._clock()
        with self._lock:
            for job in jobs:
                if not validate_job(job):
                    logger.warning(f"[store] rejecting job without identity: {job.get('external_id')!r}")
                    result.failed += 1
                    continue

                key = job["canonical_job_id"]
                existing = self._jobs.get(key)
                if existing is None:
                    self._jobs[key] = {**job, "created_at": now, "last_seen_at": now, "is_active": True}
                    result.inserted += 1
                elif any(existing.get(f) != job.get(f) for f in MUTABLE_FIELDS):
                    self._jobs[key] = {
                        **existing, **job,
                        "created_at": existing["created_at"], "last_seen_at": now, "is_active": True,
                    }
                    result.updated += 1
                else:
                    existing["last_seen_at"] = now
                    existing["is_active"] = True
                    result.unchanged += 1
        return result

    def mark_missing_inactive(self, company_id: str, current_ids: Iterable[str]) -> int:
        """Deactivate this company's active jobs that the latest pass didn't see."""
        seen = set(current_ids)
        marked = 0
        with self._lock:
            for key, record in self._jobs.items():
                if record.get("company_id") == company_id and record.get("is_active") and key not in seen:
                    record["is_active"] = False
                    marked += 1
        if marked:
            logger.info(f"[store] {company_id}: marked {marked} jobs inactive")
        return marked

    def get(self, canonical_job_id: str) -> Optional[JobRecord]:
        with self._lock:
            record = self._jobs.get(canonical_job_id)
            return dict(record) if record is not None else None

    def query(
        self,
        company_id: Optional[str] = None,
        country: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[JobRecord]:
        country = country.upper() if country else None
        with self._lock:
            records = [dict(r) for r in self._jobs.values()]
        return [
            r for r in records
            if (company_id is None or r.get("company_id") == company_id)
            and (country is None or country in (r.get("countries") or []))
            and (is_active is None or r.get("is_active") == is_active)
        ]

    def stats(self, company_id: Optional[str] = None) -> Dict:
        total = active = 0
        by_country: Dict[str, int] = {}
        by_company: Dict[str, int] = {}
        for r in self.query(company_id=company_id):
            total += 1
            if r.get("is_active"):
                active += 1
            by_country[r["primary_country"]] = by_country.get(r["primary_country"], 0) + 1
            by_company[r["company_id"]] = by_company.get(r["company_id"], 0) + 1
        return {"total": total, "active": active, "by_country": by_country, "by_company": by_company}

    def all_jobs(self) -> List[JobRecord]:
        return self.query()

    def clear(self) -> None:
        with self._lock:
            self._jobs.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
