# src/jobagg/clients/workday.py

"""
Workday careers sites, collected through the browser-automation actor.

Workday blocks plain HTTP scraping, so this connector hands the URL to the
actor and normalizes whatever lands in its dataset. Unlike the HTTP
connectors it raises on failure: a failed or timed-out run cost real money
and must show up as an error for the company, not as "zero jobs".
"""

from __future__ import annotations
import logging
import time
from typing import Any, Callable, Dict

import httpx

from jobagg.clients import apify
from jobagg.clients.base import ConnectorResult
from jobagg.config import Settings
from jobagg.models import Company
from jobagg.pipeline.normalize import SOURCE_WORKDAY, normalize_records

logger = logging.getLogger(__name__)


def build_run_input(careers_url: str, max_items: int) -> Dict[str, Any]:
    return {
        "start_url": careers_url,
        "max_items": max_items,
        "proxy_configuration": {"useApifyProxy": True},
        "keyword_filter": "",
        "location_filter": "",
    }


def fetch_workday_jobs(
    company: Company,
    client: httpx.Client,
    settings: Settings,
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> ConnectorResult:
    run_input = build_run_input(company["careers_url"], settings.apify_max_items)
    logger.info(f"[workday] {company['id']}: collecting {company['careers_url']} via actor")

    items = apify.run_actor_and_fetch(client, settings, run_input, sleep=sleep, clock=clock)

    jobs, failures = normalize_records(items, company["id"], company["name"], SOURCE_WORKDAY, company.get("country"))
    logger.info(f"[workday] {company['id']}: {len(items)} items -> {len(jobs)} jobs ({failures} dropped)")
    return ConnectorResult(SOURCE_WORKDAY, jobs, items_fetched=len(items), normalization_failures=failures)
