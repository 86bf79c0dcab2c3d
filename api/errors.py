# WORKFLOW: Exception handlers mapping scrape pipeline errors to HTTP responses.
# Used by: api.main (registered on the FastAPI app)
# Handlers:
# 1. ScrapeRequestValidationError / RequestValidationError -> 400 with field messages
# 2. DiscoveryUnavailableError -> 502 with the FAILED job report
# 3. JobFatalError -> 500 with the FAILED job report
# 4. ReportValidationError -> 500 "Report Validation Failed"
# 5. ScraperError -> 500
#
# Error flow: Router raises -> Handler logs -> ApiErrorResponse/ValidationErrorResponse JSON

import logging
from datetime import datetime, timezone
from typing import Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.schemas.request import FIELD_ALIASES
from api.schemas.response import ApiErrorResponse, ValidationErrorResponse
from core.exceptions import (
    DiscoveryUnavailableError,
    JobFatalError,
    ReportValidationError,
    ScrapeRequestValidationError,
    ScraperError,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _validation_response(request: Request, errors: Dict[str, str]) -> JSONResponse:
    body = ValidationErrorResponse(
        timestamp=_now(),
        status=status.HTTP_400_BAD_REQUEST,
        error="Validation Failed",
        errors=errors,
        path=request.url.path,
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump(mode="json", by_alias=True))


def _error_response(request: Request, status_code: int, error: str, exc: Exception, report=None) -> JSONResponse:
    body = ApiErrorResponse(
        timestamp=_now(),
        status=status_code,
        error=error,
        message=str(exc),
        path=request.url.path,
        report=report,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


async def handle_scrape_request_validation(request: Request, exc: ScrapeRequestValidationError) -> JSONResponse:
    logger.warning(f"Validation error: {exc}")
    return _validation_response(request, exc.errors)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Validation error: {exc.errors()}")
    errors: Dict[str, str] = {}
    for item in exc.errors():
        loc = [str(part) for part in item.get("loc", ())]
        # First element is the parameter source ("query", "body", ...)
        if len(loc) > 1:
            loc = loc[1:]
        field = FIELD_ALIASES.get(loc[0], loc[0]) if loc else "request"
        errors.setdefault(field, item.get("msg", "Invalid value"))
    return _validation_response(request, errors)


async def handle_discovery_unavailable(request: Request, exc: DiscoveryUnavailableError) -> JSONResponse:
    logger.error(f"Search failed: {exc}")
    return _error_response(request, status.HTTP_502_BAD_GATEWAY, "Search Failed", exc, exc.report)


async def handle_job_fatal(request: Request, exc: JobFatalError) -> JSONResponse:
    logger.error(f"Scraping failed: {exc}")
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Scraping Failed", exc, exc.report)


async def handle_report_validation(request: Request, exc: ReportValidationError) -> JSONResponse:
    logger.error(f"Report validation failed: {exc}")
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Report Validation Failed", exc)


async def handle_scraper_error(request: Request, exc: ScraperError) -> JSONResponse:
    logger.error(f"Scraper error: {exc}")
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Scraper Error", exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ScrapeRequestValidationError, handle_scrape_request_validation)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(DiscoveryUnavailableError, handle_discovery_unavailable)
    app.add_exception_handler(JobFatalError, handle_job_fatal)
    app.add_exception_handler(ReportValidationError, handle_report_validation)
    app.add_exception_handler(ScraperError, handle_scraper_error)
