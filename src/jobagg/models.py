# src/jobagg/models.py
"""
Lightweight typed dictionaries for the records that flow through the pipeline.

Everything a connector hands back is a plain dict with type hints:
- raw source records are whatever JSON the careers site returned,
- `NormalizedJob` is the canonical shape every source is mapped into,
- `JobRecord` is a `NormalizedJob` once the store has seen it.

At runtime these are just dicts, so they serialize straight to JSON.
"""

from typing import Any, Dict, List, Optional, TypedDict

# Raw payloads are opaque to everything but their normalizer branch.
RawRecord = Dict[str, Any]

UNKNOWN_COUNTRY = "UNKNOWN"


class Company(TypedDict, total=False):
    """One configured employer."""

    # Stable slug derived from the display name (e.g. "novo-nordisk")
    id: str

    name: str

    # Careers page; may be a full URL or just a bare domain ("matas.dk")
    careers_url: str

    # ISO code used when nothing can be inferred from a job's locations
    country: Optional[str]


class NormalizedJob(TypedDict, total=False):
    """
    Canonical job posting.

    Notes:
    - `canonical_job_id` is the only deduplication key.
    - `countries` keeps discovery order; `primary_country` is its first entry
      or "UNKNOWN".
    """

    canonical_job_id: str
    source: str
    external_id: str
    company_id: str
    company_name: str
    title: str
    apply_url: str
    source_url: str
    locations: List[str]
    countries: List[str]
    primary_country: str
    department: Optional[str]
    posted_at: Optional[str]
    updated_at: Optional[str]
    description_text: Optional[str]

    # Only search-backed sources (Adzuna) carry these
    salary_min: Optional[float]
    salary_max: Optional[float]


class JobRecord(NormalizedJob, total=False):
    """A stored job: the normalized fields plus lifecycle bookkeeping."""

    created_at: str
    last_seen_at: str
    is_active: bool


# Fields whose drift turns an "unchanged" sighting into an "updated" one.
MUTABLE_FIELDS = ("title", "apply_url", "locations", "countries")

# Fields that must be non-empty for a normalized job to be accepted.
REQUIRED_FIELDS = (
    "canonical_job_id",
    "source",
    "external_id",
    "company_name",
    "company_id",
    "title",
)
