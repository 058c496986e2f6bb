import dataclasses

import httpx
import pytest

from jobagg.availability import (
    Availability,
    AvailabilityRegistry,
    FallbackConfig,
    FallbackType,
    create_onboarding_request,
)
from jobagg.companies import COMPANIES, get_company, make_company
from jobagg.pipeline.platform import PlatformTag


@pytest.fixture
def no_token(settings):
    return dataclasses.replace(settings, apify_token=None)


def test_blocked_enterprise_needs_onboarding(no_token):
    status = AvailabilityRegistry(no_token).status(get_company("lego"))
    assert not status.available
    assert status.status is Availability.BLOCKED
    assert status.fallback_type is FallbackType.BLOCKED
    assert status.requires_onboarding


def test_fallback_wins_even_with_automation(settings):
    assert not AvailabilityRegistry(settings).status(get_company("lego")).available


def test_workday_depends_on_automation_runner(settings, no_token):
    coloplast = get_company("coloplast")
    blocked = AvailabilityRegistry(no_token).status(coloplast)
    assert not blocked.available
    assert blocked.status is Availability.BLOCKED
    assert not blocked.requires_onboarding

    active = AvailabilityRegistry(settings).status(coloplast)
    assert active.available
    assert active.platform is PlatformTag.WORKDAY


def test_http_platforms_are_active(no_token):
    registry = AvailabilityRegistry(no_token)
    matas = registry.status(get_company("matas"))
    assert matas.available and matas.platform is PlatformTag.EMPLY
    novo = registry.status(get_company("Novo Nordisk"))
    assert novo.available and novo.platform is PlatformTag.SUCCESSFACTORS


def test_platforms_without_connector_are_unsupported(no_token):
    registry = AvailabilityRegistry(no_token)
    lever = registry.status(make_company("Acme", "https://jobs.lever.co/acme"))
    assert lever.status is Availability.UNSUPPORTED
    unknown = registry.status(make_company("Widgets", "https://widgets.example/careers"))
    assert unknown.status is Availability.UNSUPPORTED
    assert not unknown.requires_onboarding


@pytest.mark.parametrize("kind,expected", [
    (FallbackType.MANUAL_ONBOARD, Availability.PENDING_FEED),
    (FallbackType.OFFICIAL_FEED, Availability.PENDING_FEED),
    (FallbackType.PARTNER_API, Availability.PENDING_PARTNERSHIP),
])
def test_pending_fallbacks(no_token, kind, expected):
    company = make_company("Acme", "https://boards.greenhouse.io/acme")
    registry = AvailabilityRegistry(no_token, fallbacks={})
    registry.register(FallbackConfig("acme", "Acme", kind))
    status = registry.status(company)
    assert not status.available
    assert status.status is expected


def test_browser_automation_fallback(settings, no_token):
    company = make_company("Arla", "https://jobs.arla.com/")
    entry = FallbackConfig("arla", "Arla", FallbackType.BROWSER_AUTOMATION)

    on = AvailabilityRegistry(settings, fallbacks={"arla": entry}).status(company)
    assert on.available and on.platform is PlatformTag.WORKDAY

    off = AvailabilityRegistry(no_token, fallbacks={"arla": entry}).status(company)
    assert not off.available and off.status is Availability.BLOCKED


def test_onboarding_request_starts_disabled(no_token):
    config = create_onboarding_request("Ørsted", "https://orsted.com/careers", feed_url="https://orsted.com/feed.xml",
                                       feed_type="XML")
    assert config.company_id == "orsted"
    assert config.fallback_type is FallbackType.OFFICIAL_FEED
    assert not config.enabled

    registry = AvailabilityRegistry(no_token)
    registry.register(config)
    status = registry.status(get_company("orsted"))
    assert status.status is Availability.PENDING_FEED

    manual = create_onboarding_request("Widgets", "https://widgets.example/jobs")
    assert manual.fallback_type is FallbackType.MANUAL_ONBOARD


def test_summary(no_token):
    summary = AvailabilityRegistry(no_token).summary(COMPANIES)
    stats = summary["stats"]
    assert stats["total"] == len(COMPANIES)
    assert stats["available"] + stats["blocked"] == stats["total"]
    # lego, vestas and danske bank are on the blocked list
    assert stats["needs_onboarding"] == 3
    assert len(summary["companies"]) == len(COMPANIES)
    lego = next(c for c in summary["companies"] if c["company_id"] == "lego")
    assert lego["status"] == "BLOCKED"
    assert lego["platform"] == "workday"
    assert lego["fallback_type"] == "BLOCKED"


def test_probe_detects_platform_from_html(no_token, mock_client):
    company = make_company("Widgets", "https://widgets.example/careers")
    registry = AvailabilityRegistry(no_token)

    def handler(request):
        return httpx.Response(200, text='<iframe src="https://boards.greenhouse.io/embed/job_board?for=widgets">')

    with mock_client(handler) as client:
        detected = registry.probe([company, get_company("matas")], client)

    assert detected == {"widgets": PlatformTag.GREENHOUSE}
    assert registry.status(company).available
