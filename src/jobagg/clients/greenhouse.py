# src/jobagg/clients/greenhouse.py

"""
Greenhouse public job-board API (free, no key).

Board URL:  https://boards.greenhouse.io/<board>
API:        https://boards-api.greenhouse.io/v1/boards/<board>/jobs?content=false
"""

from __future__ import annotations
import logging
import re
from typing import Optional

import httpx

from jobagg.clients import http
from jobagg.clients.base import ConnectorResult
from jobagg.config import Settings
from jobagg.models import Company
from jobagg.pipeline.normalize import SOURCE_GREENHOUSE, normalize_records

logger = logging.getLogger(__name__)

API_URL = "https://boards-api.greenhouse.io/v1/boards/{board}/jobs"

_BOARD_RE = re.compile(r"greenhouse\.io/([^/?#]+)", re.IGNORECASE)


def board_id(careers_url: str) -> Optional[str]:
    """'https://boards.greenhouse.io/acme?gh_src=x' -> 'acme'."""
    m = _BOARD_RE.search(careers_url or "")
    if not m:
        return None
    board = m.group(1)
    # embed URLs carry the board as a query parameter instead
    if board == "embed":
        q = re.search(r"[?&]for=([^&#]+)", careers_url)
        return q.group(1) if q else None
    return board


def fetch_greenhouse_jobs(company: Company, client: httpx.Client, settings: Settings) -> ConnectorResult:
    board = board_id(company.get("careers_url", ""))
    if not board:
        return ConnectorResult.failed(SOURCE_GREENHOUSE, "no board id in careers URL")

    url = API_URL.format(board=board)
    try:
        resp = http.get(client, url, params={"content": "false"})
    except httpx.HTTPError as e:
        logger.warning(f"[greenhouse] {company['id']}: request failed: {e}")
        return ConnectorResult.failed(SOURCE_GREENHOUSE, f"request failed: {e}")

    if not resp.is_success:
        logger.warning(f"[greenhouse] {company['id']}: HTTP {resp.status_code} from {url}")
        return ConnectorResult.failed(SOURCE_GREENHOUSE, f"HTTP {resp.status_code}", status_code=resp.status_code)

    try:
        data = resp.json()
    except ValueError:
        return ConnectorResult.failed(SOURCE_GREENHOUSE, "response is not JSON")

    raw_jobs = data.get("jobs") if isinstance(data, dict) else None
    if not isinstance(raw_jobs, list):
        return ConnectorResult.failed(SOURCE_GREENHOUSE, "payload has no 'jobs' list")

    jobs, failures = normalize_records(
        raw_jobs, company["id"], company["name"], SOURCE_GREENHOUSE, company.get("country")
    )
    logger.info(f"[greenhouse] {company['id']}: board {board} -> {len(jobs)} jobs")
    return ConnectorResult(SOURCE_GREENHOUSE, jobs, items_fetched=len(raw_jobs), normalization_failures=failures)
