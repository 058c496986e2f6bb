# src/jobagg/pipeline/normalize.py
"""
Convert raw source records into `NormalizedJob` dicts.

Every source gets a small mapper that pulls the interesting fields out of
its JSON. The shared builder then derives the identity, countries and the
canonical id, so all sources agree on what "the same job" means.

Identity priority (fixed; changing it re-keys every stored job):
  1. posting id
  2. requisition id
  3. last path segment of the apply URL
  4. md5 of the whole raw record
canonical_job_id = sha256("<source>:<external_id>")
"""

from __future__ import annotations
import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional
from urllib.parse import urlparse

from jobagg.companies import company_id as make_company_id
from jobagg.models import REQUIRED_FIELDS, NormalizedJob, RawRecord, UNKNOWN_COUNTRY
from jobagg.pipeline.countries import classify, detect_countries

logger = logging.getLogger(__name__)

SOURCE_GREENHOUSE = "greenhouse"
SOURCE_EMPLY = "emply"
SOURCE_SUCCESSFACTORS = "successfactors"
SOURCE_WORKDAY = "workday"
SOURCE_ADZUNA = "adzuna"

GREENHOUSE_EMBED_URL = "https://boards.greenhouse.io/embed/job_app?token={id}"


# ---- Identity -----------------------------------------------------------------

def canonical_job_id(source: str, external_id: str) -> str:
    return hashlib.sha256(f"{source}:{external_id}".encode("utf-8")).hexdigest()


def record_hash(raw: RawRecord) -> str:
    payload = json.dumps(raw, sort_keys=True, default=str, ensure_ascii=False)
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def last_path_segment(url: Optional[str]) -> str:
    if not url:
        return ""
    path = urlparse(url).path if "://" in url else url.split("?", 1)[0]
    parts = [p for p in path.split("/") if p]
    return parts[-1] if parts else ""


def derive_external_id(
    raw: RawRecord,
    *,
    posting_id: Any = None,
    requisition_id: Any = None,
    url_id: Any = None,
    apply_url: Optional[str] = None,
) -> str:
    for candidate in (posting_id, requisition_id, url_id):
        value = _text(candidate)
        if value:
            return value
    return last_path_segment(apply_url) or record_hash(raw)


def _iso(raw: Any) -> Optional[str]:
    # "2025-09-26T07:20:13Z" -> "2025-09-26T07:20:13+00:00"; prose dates -> None
    value = _text(raw)
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.isoformat()


def _str_list(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [s for s in (_text(v) for v in value) if s]
    s = _text(value)
    return [s] if s else []


def _field(value: Any, key: str) -> str:
    # {"name": "London"} -> "London"; a bare string is taken as-is
    if isinstance(value, dict):
        return _text(value.get(key))
    return _text(value) if isinstance(value, str) else ""


# ---- Per-source field mappers -------------------------------------------------

def _greenhouse_fields(x: RawRecord) -> Dict[str, Any]:
    job_id = x.get("id")
    location = _field(x.get("location"), "name")
    departments = x.get("departments") or []
    apply_url = _text(x.get("absolute_url"))
    if not apply_url and job_id is not None:
        apply_url = GREENHOUSE_EMBED_URL.format(id=job_id)
    return {
        "posting_id": job_id,
        "requisition_id": x.get("requisition_id"),
        "title": _text(x.get("title")),
        "apply_url": apply_url,
        "source_url": apply_url,
        "locations": [location] if location else [],
        "department": _text(departments[0].get("name")) if departments and isinstance(departments[0], dict) else None,
        "posted_at": _iso(x.get("first_published")),
        "updated_at": _iso(x.get("updated_at")),
    }


def _emply_fields(x: RawRecord) -> Dict[str, Any]:
    # The connector adds "url" (base + /ad/<slug>/<shortId>) before we get here
    url = _text(x.get("url"))
    return {
        "posting_id": x.get("id") or x.get("jobId"),
        "requisition_id": x.get("shortId"),
        "title": _text(x.get("title")),
        "apply_url": url,
        "source_url": url,
        "locations": _str_list(x.get("address")),
        "department": _text(x.get("departmentLabel")) or None,
        "posted_at": _iso(x.get("published") or x.get("publishedDate")),
        "updated_at": _iso(x.get("updated")),
        "description_text": _text(x.get("description")) or None,
    }


def _successfactors_fields(x: RawRecord) -> Dict[str, Any]:
    url = _text(x.get("url"))
    return {
        "requisition_id": x.get("requisition_id"),
        "title": _text(x.get("title")),
        "apply_url": url,
        "source_url": url,
        "locations": _str_list(x.get("location")),
    }


def _workday_fields(x: RawRecord) -> Dict[str, Any]:
    job_url = _text(x.get("job_url"))
    apply_url = job_url or _text(x.get("applyUrl")) or _text(x.get("url"))
    source_url = job_url or _text(x.get("url")) or _text(x.get("applyUrl"))

    # ".../job/Billund/Designer_R-0123" -> "R-0123"
    url_id = last_path_segment(job_url).split("_")[-1] if job_url else None

    if isinstance(x.get("locations"), list):
        locations = _str_list(x.get("locations"))
    elif x.get("location"):
        locations = _str_list(x.get("location"))
    else:
        locations = _str_list(x.get("locations_derived"))

    return {
        "posting_id": x.get("post_id") or x.get("jobId"),
        "requisition_id": x.get("requisitionId"),
        "url_id": url_id,
        "title": _text(x.get("job_title")) or _text(x.get("title")),
        "apply_url": apply_url,
        "source_url": source_url,
        "locations": locations,
        "country_cues": _str_list(x.get("country")) + _str_list(x.get("countries")),
        "posted_at": _iso(x.get("postedDate")),
        "updated_at": _iso(x.get("updatedDate")),
        "description_text": _text(x.get("description")) or None,
    }


def _adzuna_fields(x: RawRecord) -> Dict[str, Any]:
    location = x.get("location") if isinstance(x.get("location"), dict) else {}
    display = _field(x.get("location"), "display_name") or next(iter(_str_list(location.get("area"))), "")
    url = _text(x.get("redirect_url"))
    return {
        "posting_id": x.get("id"),
        "title": _text(x.get("title")),
        "apply_url": url,
        "source_url": url,
        "locations": [display] if display else [],
        "department": _field(x.get("category"), "label") or None,
        "posted_at": _iso(x.get("created")),
        "description_text": _text(x.get("description")) or None,
        "salary_min": x.get("salary_min"),
        "salary_max": x.get("salary_max"),
    }


FieldMapper = Callable[[RawRecord], Dict[str, Any]]

FIELD_MAPPERS: Dict[str, FieldMapper] = {
    SOURCE_GREENHOUSE: _greenhouse_fields,
    SOURCE_EMPLY: _emply_fields,
    SOURCE_SUCCESSFACTORS: _successfactors_fields,
    SOURCE_WORKDAY: _workday_fields,
    SOURCE_ADZUNA: _adzuna_fields,
}


# ---- Builder ------------------------------------------------------------------

def normalize(
    raw: RawRecord,
    company_id: str,
    company_name: str,
    source: str,
    default_country: Optional[str] = None,
) -> NormalizedJob:
    """
    Map one raw record into the canonical schema.

    Always produces a canonical id (falling back to a whole-record hash);
    whether the result is usable is decided by `validate_job`.
    """
    try:
        mapper = FIELD_MAPPERS[source]
    except KeyError:
        raise ValueError(f"no normalizer registered for source {source!r}") from None

    f = mapper(raw)
    external_id = derive_external_id(
        raw,
        posting_id=f.get("posting_id"),
        requisition_id=f.get("requisition_id"),
        url_id=f.get("url_id"),
        apply_url=f.get("apply_url"),
    )

    locations = f.get("locations") or []
    countries, primary = classify(locations)
    for cue in f.get("country_cues") or []:
        for code in detect_countries(cue):
            if code not in countries:
                countries.append(code)
    if primary == UNKNOWN_COUNTRY and countries:
        primary = countries[0]
    if not countries and default_country:
        countries = [default_country.upper()]
        primary = countries[0]

    job: NormalizedJob = {
        "canonical_job_id": canonical_job_id(source, external_id),
        "source": source,
        "external_id": external_id,
        "company_id": company_id,
        "company_name": company_name,
        "title": f.get("title") or "",
        "apply_url": f.get("apply_url") or "",
        "source_url": f.get("source_url") or "",
        "locations": list(locations),
        "countries": countries,
        "primary_country": primary,
    }
    for key in ("department", "posted_at", "updated_at", "description_text", "salary_min", "salary_max"):
        if f.get(key) is not None:
            job[key] = f[key]
    return job


def validate_job(job: NormalizedJob) -> bool:
    """All identity fields and the title must be non-empty strings."""
    return all(isinstance(job.get(k), str) and job.get(k).strip() for k in REQUIRED_FIELDS)


class NormalizationOutcome(NamedTuple):
    jobs: List[NormalizedJob]
    failures: int


def normalize_records(
    records: Iterable[RawRecord],
    company_id: str,
    company_name: str,
    source: str,
    default_country: Optional[str] = None,
) -> NormalizationOutcome:
    """Normalize a batch; malformed records are dropped and counted."""
    if source not in FIELD_MAPPERS:
        raise ValueError(f"no normalizer registered for source {source!r}")
    jobs: List[NormalizedJob] = []
    failures = 0
    for raw in records:
        if not isinstance(raw, dict):
            failures += 1
            continue
        try:
            job = normalize(raw, company_id, company_name, source, default_country)
        except (AttributeError, TypeError, ValueError) as e:
            failures += 1
            logger.debug(f"[normalize] unreadable {source} record for {company_id}: {e}")
            continue
        if validate_job(job):
            jobs.append(job)
        else:
            failures += 1
            logger.debug(f"[normalize] dropped {source} record for {company_id}: {job.get('external_id')!r}")
    return NormalizationOutcome(jobs, failures)


def normalize_adzuna(results_json: dict, country: str) -> NormalizationOutcome:
    """
    Adzuna search results -> normalized jobs.

    Market search results belong to whatever employer posted them, so the
    company identity comes from each result instead of our config.
    """
    jobs: List[NormalizedJob] = []
    failures = 0
    for x in results_json.get("results") or []:
        if not isinstance(x, dict):
            failures += 1
            continue
        name = _field(x.get("company"), "display_name") or "Unknown Company"
        try:
            job = normalize(x, make_company_id(name), name, SOURCE_ADZUNA, default_country=country)
        except (AttributeError, TypeError, ValueError) as e:
            failures += 1
            logger.debug(f"[normalize] unreadable adzuna result for {name}: {e}")
            continue
        if validate_job(job):
            jobs.append(job)
        else:
            failures += 1
    return NormalizationOutcome(jobs, failures)
