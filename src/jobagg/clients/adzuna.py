# src/jobagg/clients/adzuna.py

"""
Client for Adzuna's Jobs search API, the search-backed market source.

Unlike the careers-site connectors this one is keyword driven: it answers
"who is hiring data engineers in Denmark" rather than "what does LEGO have
open". Results are normalized into the same canonical job shape.
"""

from __future__ import annotations
import logging
from typing import Dict, Generator, List, Optional

import httpx

from jobagg.clients import http
from jobagg.config import Settings
from jobagg.errors import ConfigurationError, ConnectorError
from jobagg.models import NormalizedJob
from jobagg.pipeline.normalize import SOURCE_ADZUNA, normalize_adzuna

logger = logging.getLogger(__name__)

BASE_URL = "https://api.adzuna.com/v1/api/jobs"

# Countries Adzuna serves
COUNTRIES = frozenset({
    "at", "au", "be", "br", "ca", "ch", "de", "es", "fr", "gb",
    "in", "it", "mx", "nl", "nz", "pl", "sg", "us", "za",
})


def _search_url(country: str, page: int) -> str:
    # Adzuna paginates with integer pages: /search/1, /search/2, ...
    return f"{BASE_URL}/{country}/search/{page}"


def _credentials(settings: Settings) -> Dict[str, str]:
    if not settings.adzuna_app_id or not settings.adzuna_app_key:
        raise ConfigurationError("Set ADZUNA_APP_ID and ADZUNA_APP_KEY to search Adzuna")
    return {"app_id": settings.adzuna_app_id, "app_key": settings.adzuna_app_key}


def adzuna_search(
    client: httpx.Client,
    settings: Settings,
    query: str,
    *,
    country: str = "gb",
    page: int = 1,
    results_per_page: int = 50,
    where: Optional[str] = None,
) -> Dict:
    """
    Fetch ONE page of search results and return Adzuna's raw JSON.

    Arguments:
    - query: what to search for, e.g. "data engineer".
    - country: two-letter code Adzuna expects ("gb", "de", ...). Denmark is
      not one of them.
    - page: 1-based results page.
    - where: optional location filter (e.g. "Manchester").

    Returns the full response dict (keys like "count", "results"); pass it to
    `normalize_adzuna` to get canonical jobs.
    """
    country = country.lower()
    if country not in COUNTRIES:
        raise ValueError(f"Adzuna does not serve country {country!r}")
    if page < 1:
        raise ValueError("page must be a positive integer")

    params: Dict[str, str] = {**_credentials(settings), "what": query, "results_per_page": str(results_per_page)}
    if where:
        params["where"] = where

    resp = http.get(client, _search_url(country, page), params=params)
    if not resp.is_success:
        # the body can echo our key back; keep only the status
        raise ConnectorError(SOURCE_ADZUNA, f"search HTTP {resp.status_code}", status_code=resp.status_code)
    return resp.json()


def adzuna_iter_search(
    client: httpx.Client,
    settings: Settings,
    query: str,
    *,
    country: str = "gb",
    max_pages: int = 1,
    results_per_page: int = 50,
    where: Optional[str] = None,
) -> Generator[Dict, None, None]:
    """Yield raw pages until `max_pages` or an empty page."""
    for page in range(1, max_pages + 1):
        data = adzuna_search(
            client, settings, query,
            country=country, page=page, results_per_page=results_per_page, where=where,
        )
        yield data
        if not data.get("results"):
            break


def search_market_jobs(
    client: httpx.Client,
    settings: Settings,
    query: str,
    *,
    country: str = "gb",
    max_pages: int = 1,
    results_per_page: int = 50,
    where: Optional[str] = None,
) -> List[NormalizedJob]:
    """All pages normalized, first sighting of each canonical id kept."""
    jobs: List[NormalizedJob] = []
    seen = set()
    for data in adzuna_iter_search(
        client, settings, query,
        country=country, max_pages=max_pages, results_per_page=results_per_page, where=where,
    ):
        batch, failures = normalize_adzuna(data, country.upper())
        if failures:
            logger.info(f"[adzuna] dropped {failures} unusable results for {query!r}")
        for job in batch:
            if job["canonical_job_id"] not in seen:
                seen.add(job["canonical_job_id"])
                jobs.append(job)
    return jobs
