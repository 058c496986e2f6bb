# src/jobagg/clients/http.py

"""
Shared HTTP plumbing for the connectors.

- One place for headers, timeouts and retry policy.
- Transport hiccups (DNS, resets, timeouts) are retried; an HTTP status is
  an answer, so 4xx/5xx are returned to the caller untouched.
"""

from __future__ import annotations
from typing import Any, Dict, Optional
import httpx
from tenacity import retry, wait_exponential, stop_after_attempt, retry_if_exception_type


USER_AGENT = "Mozilla/5.0 (compatible; jobagg/0.1; +https://example.com/jobagg)"


def default_headers() -> Dict[str, str]:
    # Several careers sites refuse requests without a browser-ish UA
    return {"User-Agent": USER_AGENT, "Accept": "application/json, text/html;q=0.9, */*;q=0.8"}


def make_client(timeout: float = 20.0) -> httpx.Client:
    """A fresh client; callers own it and should close it (use `with`)."""
    return httpx.Client(timeout=timeout, headers=default_headers(), follow_redirects=True)


@retry(
    # wait 1s, 2s, 4s ... capped at 8s; give up after 3 tries
    wait=wait_exponential(min=1, max=8),
    stop=stop_after_attempt(3),
    retry=retry_if_exception_type(httpx.TransportError),
    reraise=True,
)
def request(
    client: httpx.Client,
    method: str,
    url: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    json: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> httpx.Response:
    return client.request(method, url, params=params, json=json, headers=headers)


def get(client: httpx.Client, url: str, **kwargs: Any) -> httpx.Response:
    return request(client, "GET", url, **kwargs)


def post(client: httpx.Client, url: str, **kwargs: Any) -> httpx.Response:
    return request(client, "POST", url, **kwargs)
