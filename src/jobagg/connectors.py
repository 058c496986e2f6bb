# src/jobagg/connectors.py
"""
One connector per platform, chosen through a single dispatch table.

Adding a platform means: a `PlatformTag`, a detector signature, and one
entry in `CONNECTORS`.
"""

from __future__ import annotations
from typing import Dict, Mapping, Optional

from jobagg.clients.base import Connector
from jobagg.clients.emply import fetch_emply_jobs
from jobagg.clients.greenhouse import fetch_greenhouse_jobs
from jobagg.clients.successfactors import fetch_successfactors_jobs
from jobagg.clients.workday import fetch_workday_jobs
from jobagg.models import Company
from jobagg.pipeline.platform import PlatformTag, detect, is_bare_domain

CONNECTORS: Dict[PlatformTag, Connector] = {
    PlatformTag.GREENHOUSE: fetch_greenhouse_jobs,
    PlatformTag.EMPLY: fetch_emply_jobs,
    PlatformTag.SUCCESSFACTORS: fetch_successfactors_jobs,
    PlatformTag.WORKDAY: fetch_workday_jobs,
}

# Platforms that need the paid automation runner rather than plain HTTP
AUTOMATION_PLATFORMS = frozenset({PlatformTag.WORKDAY})


def resolve_platform(company: Company, detected: Optional[Mapping[str, PlatformTag]] = None) -> PlatformTag:
    """
    Platform for a configured company.

    `detected` holds answers from earlier HTML probes; a bare domain with no
    other signal is treated as an Emply site.
    """
    if detected and company["id"] in detected:
        return detected[company["id"]]
    url = company.get("careers_url", "")
    tag = detect(url)
    if tag is PlatformTag.UNKNOWN and is_bare_domain(url):
        return PlatformTag.EMPLY
    return tag
