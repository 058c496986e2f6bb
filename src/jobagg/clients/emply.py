# src/jobagg/clients/emply.py

"""
Emply careers sites (free, public Positions API).

Steps:
1. Work out the Emply base URL: the careers URL itself when it is an
   emply.com host, otherwise https://<first domain label>.career.emply.com
2. Fetch that page and scrape the embedded `sectionId: <digits>`
3. GET <base>/api/Positions?sectionId=<id> and flatten groups -> positions
"""

from __future__ import annotations
import logging
import re
from typing import Dict, List, Optional
from urllib.parse import urlparse

import httpx

from jobagg.clients import http
from jobagg.clients.base import ConnectorResult
from jobagg.config import Settings
from jobagg.models import Company, RawRecord
from jobagg.pipeline.normalize import SOURCE_EMPLY, normalize_records

logger = logging.getLogger(__name__)

_SECTION_RE = re.compile(r"sectionId:\s*(\d+)")


def emply_base_url(careers_url: str) -> str:
    """
    'matas.dk'                                  -> 'https://matas.career.emply.com'
    'https://www.matas.dk/job'                  -> 'https://matas.career.emply.com'
    'https://matas.career.emply.com/ledige-...' -> 'https://matas.career.emply.com'
    """
    url = (careers_url or "").strip()
    if not url.startswith("http"):
        url = f"https://{url}"
    host = (urlparse(url).hostname or "").lower()
    if host.endswith("emply.com"):
        return f"https://{host}"
    labels = [p for p in host.split(".") if p and p != "www"]
    label = labels[0] if labels else host
    return f"https://{label}.career.emply.com"


def section_id(html: str) -> Optional[str]:
    m = _SECTION_RE.search(html or "")
    return m.group(1) if m else None


def flatten_positions(data: Dict, base_url: str) -> List[RawRecord]:
    """groups[].positions[] -> flat list, each with its public ad URL attached."""
    out: List[RawRecord] = []
    for group in data.get("groups") or []:
        for pos in (group or {}).get("positions") or []:
            if not isinstance(pos, dict):
                continue
            record = dict(pos)
            if pos.get("slug") and pos.get("shortId"):
                record["url"] = f"{base_url}/ad/{pos['slug']}/{pos['shortId']}"
            out.append(record)
    return out


def fetch_emply_jobs(company: Company, client: httpx.Client, settings: Settings) -> ConnectorResult:
    base = emply_base_url(company.get("careers_url", ""))

    try:
        page = http.get(client, base)
    except httpx.HTTPError as e:
        logger.warning(f"[emply] {company['id']}: page request failed: {e}")
        return ConnectorResult.failed(SOURCE_EMPLY, f"page request failed: {e}")
    if not page.is_success:
        return ConnectorResult.failed(SOURCE_EMPLY, f"page HTTP {page.status_code}", status_code=page.status_code)

    sid = section_id(page.text)
    if not sid:
        logger.warning(f"[emply] {company['id']}: no sectionId on {base}")
        return ConnectorResult.failed(SOURCE_EMPLY, "no sectionId on careers page")

    try:
        resp = http.get(client, f"{base}/api/Positions", params={"sectionId": sid}, headers={"Accept": "application/json"})
    except httpx.HTTPError as e:
        return ConnectorResult.failed(SOURCE_EMPLY, f"positions request failed: {e}")
    if not resp.is_success:
        return ConnectorResult.failed(SOURCE_EMPLY, f"positions HTTP {resp.status_code}", status_code=resp.status_code)

    try:
        data = resp.json()
    except ValueError:
        return ConnectorResult.failed(SOURCE_EMPLY, "positions response is not JSON")
    if not isinstance(data, dict) or "groups" not in data:
        return ConnectorResult.failed(SOURCE_EMPLY, "positions payload has no 'groups'")

    records = flatten_positions(data, base)
    jobs, failures = normalize_records(records, company["id"], company["name"], SOURCE_EMPLY, company.get("country"))
    logger.info(f"[emply] {company['id']}: section {sid} -> {len(jobs)} jobs")
    return ConnectorResult(SOURCE_EMPLY, jobs, items_fetched=len(records), normalization_failures=failures)
