# WORKFLOW: Pydantic response schemas for scrape job reports.
# Used by: Scrape orchestrator, scrape endpoints, schema validation, testing
# Schemas include:
# 1. JobStatus - Job state machine (PENDING -> RUNNING -> COMPLETED/PARTIAL/FAILED)
# 2. ScrapedData - Tariff facts extracted from one relevant document
# 3. FetchFailure - One candidate that could not be fetched or extracted
# 4. ScrapeResponse - Terminal job report (counts, results, failures, meta)
# 5. ApiErrorResponse/ValidationErrorResponse - Error bodies
#
# Response flow: Orchestrator aggregation -> Frozen ScrapeResponse -> JSON Schema validation -> API response
# Reports are serialized with camelCase keys.

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class JobStatus(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.PARTIAL, JobStatus.FAILED)


class FailureKind(str, Enum):
    FETCH = "fetch"
    EXTRACTION = "extraction"


class ReportModel(BaseModel):
    class Config:
        frozen = True
        populate_by_name = True
        alias_generator = to_camel


class ScrapedData(ReportModel):
    url: str
    title: Optional[str] = None
    source_domain: str
    relevant_text: List[str] = Field(default_factory=list)
    exporter: Optional[str] = None
    importer: Optional[str] = None
    product: Optional[str] = None
    year: Optional[str] = Field(None, pattern=r"^[0-9]{4}$")
    tariff_rate: Optional[float] = None
    publish_date: Optional[str] = None


class FetchFailure(ReportModel):
    url: str
    reason: str
    kind: FailureKind = FailureKind.FETCH


class ScrapeMeta(ReportModel):
    max_results: int
    min_year: int
    duration_ms: Optional[int] = None


class ScrapeResponse(ReportModel):
    job_id: str
    query: str
    status: JobStatus
    total_sources_found: int = Field(0, ge=0)
    sources_scraped: int = Field(0, ge=0)
    results: List[ScrapedData] = Field(default_factory=list)
    failures: List[FetchFailure] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    meta: Optional[ScrapeMeta] = None

    class Config:
        json_schema_extra = {
            "example": {
                "jobId": "5b0f1d8e-0d1c-4d8e-9f51-0c7c1d9a2b11",
                "query": "USA steel",
                "status": "PARTIAL",
                "totalSourcesFound": 3,
                "sourcesScraped": 2,
                "results": [
                    {
                        "url": "https://www.trade.gov/steel-tariffs",
                        "title": "Section 232 Steel Tariffs",
                        "sourceDomain": "trade.gov",
                        "relevantText": [
                            "The United States imposed a 25% tariff on steel imports from China, effective 2024."
                        ],
                        "exporter": "China",
                        "importer": "United States",
                        "product": "steel",
                        "year": "2024",
                        "tariffRate": 25.0,
                        "publishDate": "2024-03-01"
                    }
                ],
                "failures": [
                    {
                        "url": "https://example.com/blocked",
                        "reason": "HTTP 403",
                        "kind": "fetch"
                    }
                ],
                "meta": {
                    "maxResults": 10,
                    "minYear": 2024,
                    "durationMs": 5120
                }
            }
        }


class ApiErrorResponse(ReportModel):
    timestamp: datetime
    status: int
    error: str
    message: str
    path: str
    report: Optional[ScrapeResponse] = None


class ValidationErrorResponse(ReportModel):
    timestamp: datetime
    status: int
    error: str
    errors: Dict[str, str]
    path: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: Optional[str] = None
    environment: Optional[str] = None
    checks: Optional[Dict[str, bool]] = None
