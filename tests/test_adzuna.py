import dataclasses

import httpx
import pytest

from jobagg.clients.adzuna import adzuna_search, search_market_jobs
from jobagg.errors import ConfigurationError, ConnectorError

PAGES = {
    1: {"results": [
        {"id": "a1", "title": "Data Engineer", "company": {"display_name": "Acme Ltd"},
         "location": {"display_name": "London, UK"}, "redirect_url": "https://www.adzuna.co.uk/jobs/land/ad/a1"},
        {"id": "a2", "title": "Analyst", "company": {"display_name": "Globex"},
         "location": {"display_name": "Manchester"}, "redirect_url": "https://www.adzuna.co.uk/jobs/land/ad/a2"},
    ]},
    # Adzuna sometimes repeats an ad across pages
    2: {"results": [
        {"id": "a2", "title": "Analyst", "company": {"display_name": "Globex"},
         "location": {"display_name": "Manchester"}, "redirect_url": "https://www.adzuna.co.uk/jobs/land/ad/a2"},
    ]},
    3: {"results": []},
}


def adzuna_handler(request):
    assert request.url.host == "api.adzuna.com"
    params = request.url.params
    assert params["app_id"] == "app-id" and params["app_key"] == "app-key"
    page = int(request.url.path.rsplit("/", 1)[-1])
    assert request.url.path == f"/v1/api/jobs/gb/search/{page}"
    return httpx.Response(200, json=PAGES[page])


def test_single_page(settings, mock_client):
    with mock_client(adzuna_handler) as client:
        data = adzuna_search(client, settings, "data engineer", results_per_page=20)
    assert [r["id"] for r in data["results"]] == ["a1", "a2"]


def test_search_market_jobs_normalizes_and_dedups(settings, mock_client):
    with mock_client(adzuna_handler) as client:
        jobs = search_market_jobs(client, settings, "data", max_pages=5)

    assert [j["external_id"] for j in jobs] == ["a1", "a2"]
    assert {j["source"] for j in jobs} == {"adzuna"}
    assert jobs[0]["company_name"] == "Acme Ltd"
    assert [j["primary_country"] for j in jobs] == ["GB", "GB"]


def test_bad_arguments(settings, mock_client):
    with mock_client(adzuna_handler) as client:
        with pytest.raises(ValueError):
            adzuna_search(client, settings, "x", country="dk")
        with pytest.raises(ValueError):
            adzuna_search(client, settings, "x", page=0)


def test_missing_credentials(settings, mock_client):
    bare = dataclasses.replace(settings, adzuna_app_id=None)
    with mock_client(adzuna_handler) as client:
        with pytest.raises(ConfigurationError):
            adzuna_search(client, bare, "x")


def test_http_error_hides_body(settings, mock_client):
    with mock_client(lambda r: httpx.Response(401, text="bad key app-key")) as client:
        with pytest.raises(ConnectorError) as excinfo:
            adzuna_search(client, settings, "x")
    assert excinfo.value.status_code == 401
    assert "app-key" not in str(excinfo.value)
