# WORKFLOW: Scrape endpoints for news-sourced tariff discovery.
# Used by: Frontend news views, integration testing, downstream persistence jobs
# Endpoints:
# 1. GET /scrape - Run a scrape job from query parameters
# 2. POST /scrape-jobs - Run a scrape job from a JSON body
#
# Request flow: HTTP request -> build_scrape_request() -> Orchestrator -> Schema validation -> Job report
# Errors are mapped by api.errors: 400 validation, 502 discovery failure, 500 total job failure or invalid report.

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from api.schemas.request import build_scrape_request
from api.schemas.response import ScrapeResponse
from api.schemas.validation import validate_scrape_report
from services.scrape_orchestrator import ScrapeOrchestrator, create_scrape_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["scrape"])


def get_scrape_orchestrator() -> ScrapeOrchestrator:
    """Dependency providing a scrape orchestrator."""
    return create_scrape_orchestrator()


async def _run_job(orchestrator: ScrapeOrchestrator, query, max_results, min_year) -> ScrapeResponse:
    request = build_scrape_request(query, max_results, min_year)
    logger.info(f"Scrape request: query={request.query}, maxResults={request.max_results}, minYear={request.min_year}")

    report = await orchestrator.run(request)
    validate_scrape_report(report)
    return report


@router.get("/scrape", response_model=ScrapeResponse)
async def scrape(
    query: Optional[str] = Query(None, description="Free-text query (2-200 characters)"),
    max_results: Optional[int] = Query(None, alias="maxResults", description="1-50, default 10"),
    min_year: Optional[int] = Query(None, alias="minYear", description="2000-2030, default 2020"),
    orchestrator: ScrapeOrchestrator = Depends(get_scrape_orchestrator),
):
    """
    Discover, fetch and extract tariff news for a query.

    Returns the terminal job report. Candidates that could not be fetched are
    listed under failures; irrelevant pages are counted as scraped only.
    """
    return await _run_job(orchestrator, query, max_results, min_year)


@router.post("/scrape-jobs", response_model=ScrapeResponse)
async def create_scrape_job(
    payload: Dict[str, Any] = Body(..., examples=[{"query": "rice tariff", "maxResults": 10, "minYear": 2024}]),
    orchestrator: ScrapeOrchestrator = Depends(get_scrape_orchestrator),
):
    """Create a scrape job (synchronous execution)."""
    return await _run_job(
        orchestrator,
        payload.get("query"),
        payload.get("maxResults"),
        payload.get("minYear"),
    )
