# WORKFLOW: Tests for the Google Custom Search client.
# Used by: CI/CD pipelines, development testing
# Test scenarios:
# 1. Successful search maps items to SearchHit records
# 2. Request parameters (key, cx, num bound, dateRestrict)
# 3. API error payloads, transport errors and missing configuration raise SearchFailedError
#
# HTTP traffic is served by httpx.MockTransport; nothing leaves the process.

import httpx
import pytest

from core.exceptions import SearchFailedError
from services.search_client import GoogleSearchClient, SearchHit, parse_search_response

BASE_URL = "https://search.test/customsearch/v1"


def _client(handler, **kwargs) -> GoogleSearchClient:
    transport = httpx.MockTransport(handler)
    return GoogleSearchClient(
        api_key=kwargs.pop("api_key", "test-key"),
        engine_id=kwargs.pop("engine_id", "test-cx"),
        base_url=BASE_URL,
        client=httpx.AsyncClient(transport=transport),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_search_returns_hits_in_provider_order():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json={
                "items": [
                    {"link": "https://www.wto.org/a", "title": "WTO tariff profile"},
                    {"link": "https://news.example.com/b"},
                    {"link": "https://news.example.com/c", "title": "Steel duties rise"},
                ]
            },
        )

    client = _client(handler, date_restrict="y1")
    hits = await client.search("USA steel tariff rate", 3)

    assert hits == [
        SearchHit(url="https://www.wto.org/a", title="WTO tariff profile"),
        SearchHit(url="https://news.example.com/c", title="Steel duties rise"),
    ]
    params = requests[0].url.params
    assert params["key"] == "test-key"
    assert params["cx"] == "test-cx"
    assert params["q"] == "USA steel tariff rate"
    assert params["num"] == "3"
    assert params["dateRestrict"] == "y1"


@pytest.mark.asyncio
async def test_search_caps_results_per_call():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"items": []})

    await _client(handler).search("rice", 50)

    assert requests[0].url.params["num"] == "10"
    assert "dateRestrict" not in requests[0].url.params


@pytest.mark.asyncio
async def test_search_raises_on_api_error_payload():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"code": 429, "message": "Quota exceeded"}})

    with pytest.raises(SearchFailedError, match="Quota exceeded"):
        await _client(handler).search("rice", 5)


@pytest.mark.asyncio
async def test_search_raises_on_http_status_without_error_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={})

    with pytest.raises(SearchFailedError, match="503"):
        await _client(handler).search("rice", 5)


@pytest.mark.asyncio
async def test_search_raises_on_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SearchFailedError):
        await _client(handler).search("rice", 5)


@pytest.mark.asyncio
async def test_search_raises_on_invalid_json():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    with pytest.raises(SearchFailedError):
        await _client(handler).search("rice", 5)


@pytest.mark.asyncio
async def test_search_requires_configuration():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"items": []})

    with pytest.raises(SearchFailedError, match="not configured"):
        await _client(handler, api_key="").search("rice", 5)

    assert calls == []


def test_parse_search_response_without_items():
    assert parse_search_response({"searchInformation": {"totalResults": "0"}}) == []
