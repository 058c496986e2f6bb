# src/jobagg/clients/apify.py

"""
Plain-function client for the Apify actor API (the browser-automation runner).

Lifecycle of a run:
  READY -> RUNNING -> SUCCEEDED | FAILED | ABORTED | TIMED-OUT

- `start_run` submits the actor input and returns the run id.
- `wait_for_run` polls at a fixed interval until a terminal state or our own
  deadline. Non-success terminal states raise `AutomationRunError`; running
  out of time raises `AutomationTimeoutError`.
- `fetch_dataset_items` pages through the run's dataset.
"""

from __future__ import annotations
import logging
import time
from typing import Any, Callable, Dict, List, Optional

import httpx

from jobagg.clients import http
from jobagg.config import Settings
from jobagg.errors import AutomationRunError, AutomationTimeoutError, ConfigurationError, ConnectorError

logger = logging.getLogger(__name__)

SUCCEEDED = "SUCCEEDED"
FAILED_STATES = frozenset({"FAILED", "ABORTED", "TIMED-OUT", "TIMED_OUT"})
PAGE_SIZE = 1000  # Apify max per dataset request


def _token(settings: Settings) -> str:
    if not settings.apify_token:
        raise ConfigurationError("APIFY_TOKEN is not set; the Workday fallback needs it")
    return settings.apify_token


def _data(resp: httpx.Response, what: str) -> Any:
    if not resp.is_success:
        raise ConnectorError("workday", f"{what}: HTTP {resp.status_code} {resp.text[:200]}", status_code=resp.status_code)
    try:
        return resp.json()
    except ValueError:
        raise ConnectorError("workday", f"{what}: response is not JSON") from None


def start_run(client: httpx.Client, settings: Settings, run_input: Dict[str, Any]) -> Dict[str, Any]:
    """POST /acts/<actor>/runs -> the run object (id, status, defaultDatasetId)."""
    url = f"{settings.apify_base_url}/acts/{settings.apify_actor_id}/runs"
    logger.info(f"[apify] starting actor {settings.apify_actor_id}")
    resp = http.post(client, url, params={"token": _token(settings)}, json=run_input)
    run = (_data(resp, "start run") or {}).get("data") or {}
    if not run.get("id"):
        raise ConnectorError("workday", "start run: response has no run id")
    logger.info(f"[apify] run started: {run['id']}")
    return run


def get_run(client: httpx.Client, settings: Settings, run_id: str) -> Dict[str, Any]:
    resp = http.get(client, f"{settings.apify_base_url}/actor-runs/{run_id}", params={"token": _token(settings)})
    return (_data(resp, "run status") or {}).get("data") or {}


def wait_for_run(
    client: httpx.Client,
    settings: Settings,
    run_id: str,
    *,
    timeout_s: Optional[float] = None,
    poll_interval_s: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Dict[str, Any]:
    """Poll until the run succeeds; raise on failure states or when the deadline passes."""
    timeout_s = settings.apify_timeout_s if timeout_s is None else timeout_s
    interval = settings.apify_poll_interval_s if poll_interval_s is None else poll_interval_s
    deadline = clock() + timeout_s

    while clock() < deadline:
        run = get_run(client, settings, run_id)
        status = str(run.get("status") or "")
        logger.debug(f"[apify] run {run_id}: {status}")

        if status == SUCCEEDED:
            logger.info(f"[apify] run {run_id} succeeded")
            return run
        if status in FAILED_STATES:
            logger.warning(f"[apify] run {run_id} ended {status}")
            raise AutomationRunError(run_id, status)

        sleep(interval)

    raise AutomationTimeoutError(run_id, timeout_s)


def fetch_dataset_items(
    client: httpx.Client,
    settings: Settings,
    dataset_id: str,
    *,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """All items of a dataset (up to `limit`), paging with offset/limit."""
    max_items = limit if limit is not None else settings.apify_max_items
    items: List[Dict[str, Any]] = []
    offset = 0

    while len(items) < max_items:
        resp = http.get(
            client,
            f"{settings.apify_base_url}/datasets/{dataset_id}/items",
            params={
                "token": _token(settings),
                "clean": "true",
                "format": "json",
                "limit": PAGE_SIZE,
                "offset": offset,
            },
        )
        page = _data(resp, "dataset items")
        if not isinstance(page, list) or not page:
            break
        items.extend(page)
        logger.debug(f"[apify] fetched {len(items)} items so far from {dataset_id}")
        if len(page) < PAGE_SIZE:
            break
        offset += PAGE_SIZE

    return items[:max_items]


def run_actor_and_fetch(
    client: httpx.Client,
    settings: Settings,
    run_input: Dict[str, Any],
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> List[Dict[str, Any]]:
    run = start_run(client, settings, run_input)
    finished = wait_for_run(client, settings, run["id"], sleep=sleep, clock=clock)
    dataset_id = finished.get("defaultDatasetId") or run.get("defaultDatasetId")
    if not dataset_id:
        raise ConnectorError("workday", f"run {run['id']} has no dataset")
    return fetch_dataset_items(client, settings, dataset_id, limit=run_input.get("max_items"))
