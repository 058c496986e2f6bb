# src/jobagg/errors.py
"""Exception types shared by connectors, the orchestrator and the service."""

from __future__ import annotations
from typing import Optional


class JobAggError(Exception):
    """Base class for everything this package raises on purpose."""


class ConfigurationError(JobAggError):
    """A required setting (token, credentials) is missing."""


class ConnectorError(JobAggError):
    """One source failed for one company: network, non-2xx or bad payload."""

    def __init__(self, source: str, reason: str, *, status_code: Optional[int] = None):
        self.source = source
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{source}: {reason}")


class AutomationRunError(ConnectorError):
    """The browser-automation run ended in a non-success terminal state."""

    def __init__(self, run_id: str, status: str, reason: Optional[str] = None):
        self.run_id = run_id
        self.status = status
        super().__init__("workday", reason or f"actor run {run_id} ended {status}")


class AutomationTimeoutError(AutomationRunError):
    """Polling gave up before the run reached a terminal state."""

    def __init__(self, run_id: str, timeout_s: float):
        self.timeout_s = timeout_s
        super().__init__(run_id, "TIMED-OUT", f"actor run {run_id} not finished after {timeout_s:g}s")


class AggregationFailedError(JobAggError):
    """No cached or fresh data could be produced at all."""
