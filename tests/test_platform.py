import httpx
import pytest

from jobagg.pipeline.platform import PlatformTag, detect, fetch_and_detect, is_bare_domain


@pytest.mark.parametrize("url,expected", [
    ("https://matas.career.emply.com/ledige-stillinger", PlatformTag.EMPLY),
    ("https://careers.novonordisk.com/search/?q=", PlatformTag.SUCCESSFACTORS),
    ("https://jobs.sap.com/search/", PlatformTag.SUCCESSFACTORS),
    ("https://boards.greenhouse.io/acme", PlatformTag.GREENHOUSE),
    ("https://lego.wd103.myworkdayjobs.com/da-DK/LEGO_External", PlatformTag.WORKDAY),
    ("https://jobs.lever.co/acme", PlatformTag.LEVER),
    ("https://example.com/careers", PlatformTag.UNKNOWN),
    ("", PlatformTag.UNKNOWN),
])
def test_detect_from_url(url, expected):
    assert detect(url) is expected


def test_html_is_only_used_when_url_is_silent():
    html = '<a href="/job/x/123456/" class="jobTitle-link">X</a>'
    assert detect("https://example.com/careers", html) is PlatformTag.SUCCESSFACTORS
    assert detect("https://boards.greenhouse.io/acme", html) is PlatformTag.GREENHOUSE


def test_html_signatures_in_order():
    assert detect("https://example.com", "<script>sectionId: 12, workday</script>") is PlatformTag.EMPLY
    assert detect("https://example.com", "<html>nothing here</html>") is PlatformTag.UNKNOWN


def test_is_bare_domain():
    assert is_bare_domain("matas.dk")
    assert not is_bare_domain("https://matas.dk")
    assert not is_bare_domain("matas.dk/jobs")
    assert not is_bare_domain("localhost")
    assert not is_bare_domain("")


def test_fetch_and_detect_uses_page_content(mock_client):
    seen = []

    def handler(request):
        seen.append((request.url.scheme, request.url.host))
        return httpx.Response(200, text="<div class='ui_jobs_grid'></div>")

    with mock_client(handler) as client:
        assert fetch_and_detect("acme.dk", client) is PlatformTag.EMPLY
    assert seen == [("https", "acme.dk")]


def test_fetch_and_detect_skips_network_when_url_is_enough(mock_client):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, text="")

    with mock_client(handler) as client:
        assert fetch_and_detect("https://jobs.lever.co/acme", client) is PlatformTag.LEVER
    assert seen == []


def test_fetch_and_detect_falls_back_on_errors(mock_client):
    def failing(request):
        raise httpx.ConnectError("no route", request=request)

    with mock_client(failing) as client:
        assert fetch_and_detect("https://example.com/jobs", client) is PlatformTag.UNKNOWN

    with mock_client(lambda r: httpx.Response(503, text="greenhouse")) as client:
        assert fetch_and_detect("https://example.com/jobs", client) is PlatformTag.UNKNOWN
