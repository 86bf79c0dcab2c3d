# WORKFLOW: End-to-end API tests for the scrape and health endpoints.
# Used by: CI/CD pipelines, development testing, quality assurance
# Test scenarios:
# 1. Health, readiness and liveness endpoints
# 2. GET /scrape and POST /scrape-jobs return schema-valid camelCase reports
# 3. Input validation -> 400 with field messages
# 4. Search failure -> 502 and total scrape failure -> 500, both carrying the report
# 5. Report failing the schema gate -> 500 with the standard error body
#
# Testing flow: Override orchestrator dependency -> Call endpoint -> Assert status and body

import jsonschema
import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routers.scrape import get_scrape_orchestrator
from api.schemas.validation import get_schema_validator
from core.exceptions import SearchFailedError

API = "/api/v1"


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def use_orchestrator(make_orchestrator):
    """Install an orchestrator built from fakes as the endpoint dependency."""

    def _use(**kwargs):
        orchestrator, search, fetch = make_orchestrator(**kwargs)
        app.dependency_overrides[get_scrape_orchestrator] = lambda: orchestrator
        return search, fetch

    return _use


def test_health_endpoints(client):
    for path in ("/healthz", f"{API}/healthz"):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    assert client.get(f"{API}/livez").json()["status"] == "alive"


def test_readiness_reports_checks(client):
    body = client.get(f"{API}/readyz").json()

    assert body["status"] in ("ready", "not_ready")
    assert body["checks"]["response_schema"] is True
    assert "search_provider" in body["checks"]


def test_scrape_returns_report(client, use_orchestrator, hits, relevant_page):
    urls = ["https://www.wto.org/steel", "https://news.example.com/steel"]
    use_orchestrator(batches=[hits(*urls)], pages={url: relevant_page(url) for url in urls})

    response = client.get(f"{API}/scrape", params={"query": "USA steel", "maxResults": 5, "minYear": 2021})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "COMPLETED"
    assert body["query"] == "USA steel"
    assert body["totalSourcesFound"] == 2
    assert body["sourcesScraped"] == 2
    assert body["results"][0]["sourceDomain"] == "wto.org"
    assert body["results"][0]["tariffRate"] == 25.0
    assert body["meta"]["maxResults"] == 5
    assert body["meta"]["minYear"] == 2021
    assert get_schema_validator().get_validation_errors(body) is None


def test_scrape_job_post_partial(client, use_orchestrator, hits, relevant_page):
    urls = ["https://a.example.com/rice", "https://b.example.com/rice"]
    use_orchestrator(batches=[hits(*urls)], pages={urls[0]: relevant_page(urls[0])})

    response = client.post(f"{API}/scrape-jobs", json={"query": "rice tariff", "maxResults": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "PARTIAL"
    assert body["sourcesScraped"] == 1
    assert body["failures"] == [{"url": urls[1], "reason": "HTTP 404", "kind": "fetch"}]


@pytest.mark.parametrize(
    "params,field",
    [
        ({}, "query"),
        ({"query": "a"}, "query"),
        ({"query": "steel", "maxResults": 51}, "maxResults"),
        ({"query": "steel", "maxResults": "abc"}, "maxResults"),
        ({"query": "steel", "minYear": 1999}, "minYear"),
    ],
)
def test_scrape_validation_errors(client, use_orchestrator, params, field):
    search, fetch = use_orchestrator()

    response = client.get(f"{API}/scrape", params=params)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation Failed"
    assert field in body["errors"]
    assert search.calls == []
    assert fetch.calls == []


def test_scrape_job_post_requires_query(client, use_orchestrator):
    use_orchestrator()

    response = client.post(f"{API}/scrape-jobs", json={"maxResults": 5})

    assert response.status_code == 400
    assert response.json()["errors"]["query"] == "Query is required"


def test_search_failure_returns_502_with_report(client, use_orchestrator):
    use_orchestrator(search_error=SearchFailedError("Google API error: Quota exceeded"))

    response = client.get(f"{API}/scrape", params={"query": "USA steel"})

    assert response.status_code == 502
    body = response.json()
    assert body["error"] == "Search Failed"
    assert "Quota exceeded" in body["message"]
    assert body["report"]["status"] == "FAILED"
    assert body["report"]["totalSourcesFound"] == 0


def test_all_sources_failing_returns_500_with_report(client, use_orchestrator, hits):
    use_orchestrator(batches=[hits("https://a.example.com/1", "https://b.example.com/2")])

    response = client.get(f"{API}/scrape", params={"query": "USA steel"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Scraping Failed"
    assert body["report"]["status"] == "FAILED"
    assert len(body["report"]["failures"]) == 2


class RejectingValidator:
    def validate_pydantic_model(self, model):
        raise jsonschema.ValidationError("results exceed sourcesScraped")


def test_invalid_report_returns_500_error_body(client, use_orchestrator, hits, relevant_page, monkeypatch):
    url = "https://news.example.com/steel"
    use_orchestrator(batches=[hits(url)], pages={url: relevant_page(url)})
    monkeypatch.setattr("api.schemas.validation.get_schema_validator", lambda: RejectingValidator())

    response = client.get(f"{API}/scrape", params={"query": "USA steel"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Report Validation Failed"
    assert "results exceed sourcesScraped" in body["message"]
    assert body["path"] == f"{API}/scrape"
