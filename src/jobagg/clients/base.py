# src/jobagg/clients/base.py
"""What every connector hands back to the orchestrator."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import httpx

from jobagg.config import Settings
from jobagg.errors import ConnectorError
from jobagg.models import Company, NormalizedJob


@dataclass
class ConnectorResult:
    """
    Result of one connector call for one company.

    A failed call still carries an (empty) job list, so "zero jobs" and
    "source failed" merge the same way; `error` keeps the failure visible.
    """

    source: str
    jobs: List[NormalizedJob] = field(default_factory=list)
    items_fetched: int = 0
    normalization_failures: int = 0
    error: Optional[ConnectorError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, source: str, reason: str, *, status_code: Optional[int] = None) -> "ConnectorResult":
        return cls(source=source, error=ConnectorError(source, reason, status_code=status_code))


# (company, http client, settings) -> result
Connector = Callable[[Company, httpx.Client, Settings], ConnectorResult]
