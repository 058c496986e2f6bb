# src/jobagg/cli.py
"""
Command-line interface for the job aggregator.

Commands:
- jobs     aggregated jobs (cached for a few minutes), with filters
- status   which companies we can collect, and why not
- ingest   crawl and upsert into the job store, deactivating removed jobs
- detect   which careers platform a URL runs on
- search   market-wide search through Adzuna
"""

from dotenv import load_dotenv
load_dotenv(override=True)  # automatically looks for a .env file in the project root

import json
import logging
from typing import Optional

import typer

from jobagg.clients.http import make_client
from jobagg.config import load_settings
from jobagg.errors import JobAggError
from jobagg.pipeline.platform import detect as detect_platform, fetch_and_detect
from jobagg.service import JobService

app = typer.Typer(help="Job aggregator")


def _service() -> JobService:
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    return JobService.from_settings(settings)


def _fail(message: str) -> None:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


@app.command()
def jobs(
    company: Optional[str] = typer.Option(None, "--company", help="Company id or name (fuzzy matched)"),
    country: Optional[str] = typer.Option(None, "--country", help="ISO country code, e.g. DK"),
    query: Optional[str] = typer.Option(None, "--query", help="Text in the title or a location"),
    recrawl: bool = typer.Option(False, "--recrawl", help="Ignore the cache and crawl now"),
):
    """
    Aggregated jobs from every available company.
    """
    service = _service()
    try:
        out = service.get_jobs(company=company, country=country, query=query, recrawl=recrawl)
    except JobAggError as e:
        _fail(f"Could not load jobs: {e}")
    typer.echo(json.dumps(out, indent=2, ensure_ascii=False))


@app.command()
def status(
    probe: bool = typer.Option(False, "--probe", help="Fetch careers pages whose URL doesn't reveal the platform"),
):
    """
    Availability of every configured company (stats + per-company detail).
    """
    service = _service()
    if probe:
        with make_client(service.settings.http_timeout_s) as client:
            service.registry.probe(service.companies, client)
    typer.echo(json.dumps(service.company_status(), indent=2, ensure_ascii=False))


@app.command()
def ingest(company_id: Optional[str] = typer.Argument(None, help="Only this company (id or name)")):
    """
    Crawl, upsert into the store and mark vanished jobs inactive.
    """
    service = _service()
    try:
        report = service.ingest(company_id)
    except ValueError as e:
        _fail(str(e))
    typer.echo(json.dumps({**report.to_dict(), "store": service.stats()}, indent=2, ensure_ascii=False))


@app.command()
def detect(
    url: str,
    fetch: bool = typer.Option(False, "--fetch", help="Also fetch the page and look at its HTML"),
):
    """
    Debug: which platform does this careers URL run on?
    """
    if fetch:
        with make_client(load_settings().http_timeout_s) as client:
            tag = fetch_and_detect(url, client)
    else:
        tag = detect_platform(url)
    typer.echo(json.dumps({"url": url, "platform": tag.value}, indent=2))


@app.command()
def search(
    query: str,
    country: str = typer.Option("gb", "--country", help="Adzuna country code"),
    limit: int = typer.Option(50, "--limit", help="Results per page"),
):
    """
    Market-wide search via Adzuna, normalized like company jobs.
    """
    service = _service()
    typer.echo(f"Searching Adzuna ({country}) for {query!r}...", err=True)
    try:
        found = service.search_market(query, country, results_per_page=limit)
    except (JobAggError, ValueError) as e:
        _fail(f"Search failed: {e}")
    typer.echo(json.dumps({"fetched": len(found), "jobs": found}, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    app()
