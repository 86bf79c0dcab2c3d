# WORKFLOW: Tests for the HTTP fetch client.
# Used by: CI/CD pipelines, development testing
# Test scenarios:
# 1. Successful HTML fetch with browser headers
# 2. Non-success status and timeouts raise SourceFetchError
# 3. Unsupported document types raise ExtractionError
#
# HTTP traffic is served by httpx.MockTransport; nothing leaves the process.

import httpx
import pytest

from core.exceptions import ExtractionError, SourceFetchError
from services.fetch_client import HttpFetchClient

USER_AGENT = "Mozilla/5.0 (test)"
HTML_BODY = b"<html><head><title>Duties</title></head><body><p>A 10% import duty on rice.</p></body></html>"


def _client(handler, **kwargs) -> HttpFetchClient:
    return HttpFetchClient(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)), **kwargs)


@pytest.mark.asyncio
async def test_fetch_html_page_with_browser_headers():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, content=HTML_BODY, headers={"content-type": "text/html; charset=utf-8"})

    page = await _client(handler, referrer="https://www.google.com/").fetch("https://news.example.com/rice", USER_AGENT)

    assert page.url == "https://news.example.com/rice"
    assert page.title == "Duties"
    assert page.passages == ["A 10% import duty on rice."]
    headers = requests[0].headers
    assert headers["user-agent"] == USER_AGENT
    assert headers["referer"] == "https://www.google.com/"
    assert "text/html" in headers["accept"]


@pytest.mark.asyncio
async def test_fetch_raises_on_http_error_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, content=b"not found")

    with pytest.raises(SourceFetchError) as exc_info:
        await _client(handler).fetch("https://news.example.com/missing", USER_AGENT)

    assert exc_info.value.url == "https://news.example.com/missing"
    assert exc_info.value.reason == "HTTP 404"


@pytest.mark.asyncio
async def test_fetch_raises_on_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(SourceFetchError) as exc_info:
        await _client(handler, timeout=2.0).fetch("https://slow.example.com/", USER_AGENT)

    assert "timed out" in exc_info.value.reason


@pytest.mark.asyncio
async def test_fetch_raises_on_connection_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("name resolution failed", request=request)

    with pytest.raises(SourceFetchError):
        await _client(handler).fetch("https://gone.example.com/", USER_AGENT)


@pytest.mark.asyncio
async def test_fetch_word_document_is_an_extraction_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            content=b"PK\x03\x04",
            headers={"content-type": "application/vnd.openxmlformats-officedocument.wordprocessingml.document"},
        )

    with pytest.raises(ExtractionError):
        await _client(handler).fetch("https://x.com/notice", USER_AGENT)
