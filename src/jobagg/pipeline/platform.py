# src/jobagg/pipeline/platform.py
"""
Recognize which applicant-tracking platform serves a careers page.

URL signatures are checked first (no network). Only when the URL says
nothing and HTML is supplied do we look at content markers.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import Optional, Sequence, Tuple

import httpx

logger = logging.getLogger(__name__)


class PlatformTag(str, Enum):
    EMPLY = "emply"
    SUCCESSFACTORS = "successfactors"
    GREENHOUSE = "greenhouse"
    WORKDAY = "workday"
    LEVER = "lever"
    UNKNOWN = "unknown"


# Checked in order; first hit wins.
URL_SIGNATURES: Sequence[Tuple[PlatformTag, Tuple[str, ...]]] = (
    (PlatformTag.EMPLY, (".emply.com", "career.emply")),
    (PlatformTag.SUCCESSFACTORS, ("successfactors", "jobs.sap.com", "careers.novonordisk")),
    (PlatformTag.GREENHOUSE, ("greenhouse.io", "boards.greenhouse")),
    (PlatformTag.WORKDAY, ("myworkdayjobs.com", ".wd")),
    (PlatformTag.LEVER, ("lever.co", "jobs.lever")),
)

# Case-sensitive, as the markers appear in rendered pages.
HTML_SIGNATURES: Sequence[Tuple[PlatformTag, Tuple[str, ...]]] = (
    (PlatformTag.EMPLY, ("emply.com", "ui_jobs_grid", "sectionId:")),
    (PlatformTag.SUCCESSFACTORS, ("jobTitle-link", 'class="jobLocation"')),
    (PlatformTag.GREENHOUSE, ("greenhouse",)),
    (PlatformTag.WORKDAY, ("workday",)),
    (PlatformTag.LEVER, ("lever.co",)),
)


def detect_from_url(url: str) -> PlatformTag:
    lower = (url or "").lower()
    for tag, needles in URL_SIGNATURES:
        if any(n in lower for n in needles):
            return tag
    return PlatformTag.UNKNOWN


def detect_from_html(html: str) -> PlatformTag:
    if not html:
        return PlatformTag.UNKNOWN
    for tag, needles in HTML_SIGNATURES:
        if any(n in html for n in needles):
            return tag
    return PlatformTag.UNKNOWN


def detect(url: str, html: Optional[str] = None) -> PlatformTag:
    """URL first, then (if given) page content; `UNKNOWN` is a normal answer."""
    tag = detect_from_url(url)
    if tag is PlatformTag.UNKNOWN and html:
        tag = detect_from_html(html)
    return tag


def is_bare_domain(careers_url: str) -> bool:
    """'matas.dk' -> True; 'https://matas.dk/jobs' -> False."""
    s = (careers_url or "").strip().lower()
    return bool(s) and "http" not in s and "/" not in s and "." in s


def fetch_and_detect(url: str, client: httpx.Client) -> PlatformTag:
    """
    Detect with page content when the URL alone is ambiguous.

    A page that can't be fetched just means we stay with the URL answer.
    """
    tag = detect_from_url(url)
    if tag is not PlatformTag.UNKNOWN:
        return tag
    target = url if url.startswith("http") else f"https://{url}"
    try:
        resp = client.get(target, follow_redirects=True)
    except httpx.HTTPError as e:
        logger.info(f"[platform] could not fetch {target}: {e}")
        return tag
    if resp.status_code >= 400:
        logger.info(f"[platform] {target} answered HTTP {resp.status_code}")
        return tag
    return detect(url, resp.text)
