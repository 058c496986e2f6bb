# src/jobagg/clients/successfactors.py

"""
SuccessFactors career pages, scraped straight from the server-rendered HTML.

Listing rows look like:
  <a href="/job/Hillerød-Environmental-Supporter/1271111601/" class="jobTitle-link">Title</a>
  ...
  <span class="jobLocation"> Hillerød, DK </span>
Title links and location spans appear in the same order, so they are paired
by position.
"""

from __future__ import annotations
import html as html_lib
import logging
import re
from typing import List, Optional
from urllib.parse import unquote, urlparse

import httpx

from jobagg.clients import http
from jobagg.clients.base import ConnectorResult
from jobagg.config import Settings
from jobagg.models import Company, RawRecord
from jobagg.pipeline.normalize import SOURCE_SUCCESSFACTORS, normalize_records

logger = logging.getLogger(__name__)

_JOB_LINK_RE = re.compile(r'href="(/job/[^"]+)"[^>]*class="jobTitle-link"[^>]*>([^<]+)</a>')
_LOCATION_RE = re.compile(r'<span class="jobLocation">\s*([^<]+?)\s*</span>')
_REQ_ID_RE = re.compile(r"/(\d{5,})/?$")


def location_from_path(path: str) -> Optional[str]:
    """'/job/Hillerød-Environmental-Supporter/1271111601/' -> 'Hillerød'."""
    parts = [p for p in unquote(path).split("/") if p and p != "job"]
    if not parts:
        return None
    first = parts[0].split("-")[0]
    return first if len(first) > 2 else None


def parse_listing(page_html: str, origin: str) -> List[RawRecord]:
    locations = [html_lib.unescape(m) for m in _LOCATION_RE.findall(page_html) if len(m.strip()) > 2]
    records: List[RawRecord] = []
    seen = set()
    for path, title in _JOB_LINK_RE.findall(page_html):
        if path in seen:
            continue
        seen.add(path)
        idx = len(records)
        req = _REQ_ID_RE.search(path)
        records.append({
            "title": html_lib.unescape(title.strip()),
            "path": path,
            "url": f"{origin}{path}",
            "location": locations[idx] if idx < len(locations) else location_from_path(path),
            "requisition_id": req.group(1) if req else None,
        })
    return records


def fetch_successfactors_jobs(company: Company, client: httpx.Client, settings: Settings) -> ConnectorResult:
    url = company.get("careers_url", "")
    if not url.startswith("http"):
        url = f"https://{url}"
    parsed = urlparse(url)
    origin = f"{parsed.scheme}://{parsed.netloc}"

    try:
        resp = http.get(client, url, headers={"Accept": "text/html,application/xhtml+xml"})
    except httpx.HTTPError as e:
        logger.warning(f"[successfactors] {company['id']}: request failed: {e}")
        return ConnectorResult.failed(SOURCE_SUCCESSFACTORS, f"request failed: {e}")
    if not resp.is_success:
        return ConnectorResult.failed(SOURCE_SUCCESSFACTORS, f"HTTP {resp.status_code}", status_code=resp.status_code)

    records = parse_listing(resp.text, origin)
    jobs, failures = normalize_records(
        records, company["id"], company["name"], SOURCE_SUCCESSFACTORS, company.get("country")
    )
    logger.info(f"[successfactors] {company['id']}: {len(jobs)} jobs from {url}")
    return ConnectorResult(SOURCE_SUCCESSFACTORS, jobs, items_fetched=len(records), normalization_failures=failures)
