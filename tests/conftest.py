import httpx
import pytest

from jobagg.config import Settings
from jobagg.pipeline.normalize import normalize


class FakeClock:
    """Manual clock; `sleep` advances it instead of blocking."""

    def __init__(self, now: float = 1000.0):
        self.now = now
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings(
        apify_token="test-token",
        apify_timeout_s=30.0,
        apify_poll_interval_s=5.0,
        max_workers=3,
        batch_timeout_s=10.0,
        adzuna_app_id="app-id",
        adzuna_app_key="app-key",
    )


@pytest.fixture
def mock_client():
    """mock_client(handler) -> httpx.Client answering through `handler`."""
    def _make(handler):
        return httpx.Client(transport=httpx.MockTransport(handler))
    return _make


@pytest.fixture
def make_job():
    """Greenhouse-shaped normalized job, handy for store/cache/filter tests."""
    def _make(job_id, title="Engineer", company_id="acme", company_name="Acme", location="Copenhagen"):
        raw = {"id": job_id, "title": title, "location": {"name": location},
               "absolute_url": f"https://boards.greenhouse.io/{company_id}/jobs/{job_id}"}
        return normalize(raw, company_id, company_name, "greenhouse")
    return _make
