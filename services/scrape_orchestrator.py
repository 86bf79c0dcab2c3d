# WORKFLOW: Scrape job orchestrator: discover -> fetch -> extract -> filter -> aggregate.
# Used by: Scrape endpoints (one orchestrator run per request)
# Functions:
# 1. execute() - Validate raw parameters, then run the job
# 2. run() - Drive the job state machine for a validated ScrapeRequest
# 3. _process_candidate() - Fetch and extract one candidate (worker, returns an outcome)
# 4. _fetch() - One fetch bounded by the overall per-fetch time limit
# 5. build_scraped_data() - Apply the content heuristics to a fetched page
# 6. _finalize() - Decide COMPLETED / PARTIAL / FAILED and freeze the report
#
# Job flow: PENDING -> RUNNING -> Discovery -> Bounded fan-out -> Aggregation -> Terminal status
# Workers never touch job state; the orchestrator aggregates outcomes in candidate order,
# so the concurrent report matches a sequential run.

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from api.schemas.request import ScrapeRequest, build_scrape_request
from api.schemas.response import FailureKind, FetchFailure, JobStatus, ScrapedData, ScrapeMeta, ScrapeResponse
from core.config import settings
from core.exceptions import DiscoveryUnavailableError, ExtractionError, JobFatalError, SourceFetchError
from services.candidate_discovery import CandidateDiscovery
from services.content_extractor import (
    clean_text,
    contains_tariff_keywords,
    extract_product,
    extract_rate,
    extract_trade_parties,
    extract_year_from_text,
    select_relevant_passages,
    year_from_date,
)
from services.document_text import FetchedPage
from services.fetch_client import FetchBackend, create_fetch_client
from services.search_client import SearchHit, create_search_client
from services.url_trust import extract_domain
from services.user_agents import UserAgentPool, fix_encoding

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    JobStatus.PENDING: {JobStatus.RUNNING, JobStatus.FAILED},
    JobStatus.RUNNING: {JobStatus.COMPLETED, JobStatus.PARTIAL, JobStatus.FAILED},
}


@dataclass
class CandidateOutcome:
    """Result of processing one candidate. No failure means the page was fetched; data is None when irrelevant."""

    url: str
    failure: Optional[FetchFailure] = None
    data: Optional[ScrapedData] = None


@dataclass
class ScrapeJob:
    """Mutable job state, owned by the orchestrator until the report is frozen."""

    request: ScrapeRequest
    job_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: JobStatus = JobStatus.PENDING
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    started_clock: float = field(default_factory=time.monotonic)
    total_sources_found: int = 0
    sources_scraped: int = 0
    results: List[ScrapedData] = field(default_factory=list)
    failures: List[FetchFailure] = field(default_factory=list)

    def transition(self, status: JobStatus) -> None:
        if status not in ALLOWED_TRANSITIONS.get(self.status, set()):
            raise RuntimeError(f"Illegal job transition {self.status.value} -> {status.value}")
        logger.debug(f"Job {self.job_id}: {self.status.value} -> {status.value}")
        self.status = status

    def to_report(self) -> ScrapeResponse:
        return ScrapeResponse(
            job_id=self.job_id,
            query=self.request.query,
            status=self.status,
            total_sources_found=self.total_sources_found,
            sources_scraped=self.sources_scraped,
            results=list(self.results),
            failures=list(self.failures),
            started_at=self.started_at,
            finished_at=datetime.now(timezone.utc),
            meta=ScrapeMeta(
                max_results=self.request.max_results,
                min_year=self.request.min_year,
                duration_ms=int((time.monotonic() - self.started_clock) * 1000),
            ),
        )


def build_scraped_data(hit: SearchHit, url: str, page: FetchedPage) -> Optional[ScrapedData]:
    """
    Apply relevance filter and fact extraction to a fetched page.

    Args:
        hit: Search hit the page was discovered from
        url: Encoding-fixed URL that was fetched
        page: Fetched page content

    Returns:
        ScrapedData for a relevant page, None for an irrelevant one
    """
    cleaned = clean_text(page.text)
    if not contains_tariff_keywords(cleaned):
        return None

    passages = select_relevant_passages(page.passages or [page.text])

    rate = None
    for passage in passages:
        rate = extract_rate(passage)
        if rate is not None:
            break
    if rate is None:
        rate = extract_rate(cleaned)

    facts_text = " ".join(passages) or cleaned
    exporter, importer = extract_trade_parties(facts_text)

    return ScrapedData(
        url=url,
        title=hit.title or page.title,
        source_domain=extract_domain(url),
        relevant_text=passages,
        exporter=exporter,
        importer=importer,
        product=extract_product(facts_text),
        year=year_from_date(page.publish_date) or extract_year_from_text(cleaned),
        tariff_rate=rate,
        publish_date=page.publish_date,
    )


class ScrapeOrchestrator:
    """Runs scrape jobs end to end."""

    def __init__(
        self,
        discovery: CandidateDiscovery,
        fetch_backend: FetchBackend,
        user_agents: Optional[UserAgentPool] = None,
        max_concurrency: int = 5,
        fetch_delay_seconds: float = 0.0,
        fetch_timeout_seconds: float = 15.0,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if fetch_timeout_seconds <= 0:
            raise ValueError("fetch_timeout_seconds must be positive")
        self.discovery = discovery
        self.fetch_backend = fetch_backend
        self.user_agents = user_agents or UserAgentPool()
        self.max_concurrency = max_concurrency
        self.fetch_delay_seconds = fetch_delay_seconds
        self.fetch_timeout_seconds = fetch_timeout_seconds

    async def execute(
        self,
        query: Optional[str],
        max_results: Optional[int] = None,
        min_year: Optional[int] = None,
    ) -> ScrapeResponse:
        """Validate raw parameters and run the job; raises before any I/O on bad input."""
        request = build_scrape_request(query, max_results, min_year)
        return await self.run(request)

    async def run(self, request: ScrapeRequest) -> ScrapeResponse:
        """
        Execute a complete scrape job.

        Args:
            request: Validated scrape request

        Returns:
            Terminal job report (COMPLETED or PARTIAL)

        Raises:
            DiscoveryUnavailableError: Discovery failed; carries the FAILED report
            JobFatalError: Every candidate failed; carries the FAILED report
        """
        job = ScrapeJob(request=request)
        logger.info(f"Starting scrape job {job.job_id} for query: {request.query}")
        job.transition(JobStatus.RUNNING)

        try:
            candidates = await self.discovery.discover(request.query, request.max_results)
        except DiscoveryUnavailableError as e:
            logger.error(f"Scrape job {job.job_id} failed during discovery: {e}")
            job.transition(JobStatus.FAILED)
            e.report = job.to_report()
            raise

        job.total_sources_found = len(candidates)
        logger.info(f"Found {len(candidates)} sources for job {job.job_id}")

        semaphore = asyncio.Semaphore(self.max_concurrency)
        outcomes = await asyncio.gather(
            *(self._process_candidate(job.job_id, hit, semaphore) for hit in candidates)
        )

        self._aggregate(job, outcomes)
        return self._finalize(job)

    async def _process_candidate(self, job_id: str, hit: SearchHit, semaphore: asyncio.Semaphore) -> CandidateOutcome:
        url = fix_encoding(hit.url)

        async with semaphore:
            user_agent = self.user_agents.random_user_agent()
            logger.debug(f"Scraping {url} for job {job_id}")
            page, failure = await self._fetch(job_id, url, user_agent)

            # Not reached on cancellation: CancelledError leaves _fetch first
            if self.fetch_delay_seconds > 0:
                await asyncio.sleep(self.fetch_delay_seconds)

        if failure is not None:
            return CandidateOutcome(url=url, failure=failure)

        try:
            data = build_scraped_data(hit, url, page)
        except Exception as e:
            logger.warning(f"Failed to extract facts from {url} for job {job_id}: {e}")
            return CandidateOutcome(
                url=url,
                failure=FetchFailure(url=url, reason=f"{type(e).__name__}: {e}", kind=FailureKind.EXTRACTION),
            )

        return CandidateOutcome(url=url, data=data)

    async def _fetch(self, job_id: str, url: str, user_agent: str) -> Tuple[Optional[FetchedPage], Optional[FetchFailure]]:
        """Fetch one candidate within the overall time limit; failures are returned, not raised."""
        try:
            page = await asyncio.wait_for(self.fetch_backend.fetch(url, user_agent), self.fetch_timeout_seconds)
        except asyncio.TimeoutError:
            reason = f"timed out after {self.fetch_timeout_seconds}s"
            logger.warning(f"Failed to fetch {url} for job {job_id}: {reason}")
            return None, FetchFailure(url=url, reason=reason)
        except SourceFetchError as e:
            logger.warning(f"Failed to fetch {url} for job {job_id}: {e.reason}")
            return None, FetchFailure(url=url, reason=e.reason)
        except ExtractionError as e:
            logger.warning(f"Failed to extract {url} for job {job_id}: {e.reason}")
            return None, FetchFailure(url=url, reason=e.reason, kind=FailureKind.EXTRACTION)
        except Exception as e:
            logger.warning(f"Unexpected error scraping {url} for job {job_id}: {e}")
            return None, FetchFailure(url=url, reason=f"{type(e).__name__}: {e}")

        return page, None

    def _aggregate(self, job: ScrapeJob, outcomes: List[CandidateOutcome]) -> None:
        seen_urls = set()
        min_year = job.request.min_year

        for outcome in outcomes:
            if outcome.failure is not None:
                job.failures.append(outcome.failure)
                continue

            job.sources_scraped += 1
            data = outcome.data
            if data is None:
                logger.debug(f"Dropped irrelevant page {outcome.url}")
                continue
            if data.year is not None and int(data.year) < min_year:
                logger.debug(f"Filtered out old article: {data.title} ({data.year})")
                continue
            if data.url in seen_urls:
                continue

            seen_urls.add(data.url)
            job.results.append(data)

    def _finalize(self, job: ScrapeJob) -> ScrapeResponse:
        if job.total_sources_found and len(job.failures) == job.total_sources_found:
            job.transition(JobStatus.FAILED)
        elif job.failures:
            job.transition(JobStatus.PARTIAL)
        else:
            job.transition(JobStatus.COMPLETED)

        report = job.to_report()
        logger.info(
            f"Scrape job {job.job_id} {report.status.value}. "
            f"Scraped {report.sources_scraped}/{report.total_sources_found} sources, "
            f"{len(report.results)} results, {len(report.failures)} failures "
            f"in {report.meta.duration_ms}ms"
        )

        if report.status == JobStatus.FAILED:
            raise JobFatalError(
                f"All {report.total_sources_found} sources failed to scrape",
                report=report,
            )
        return report


# Factory function
def create_scrape_orchestrator() -> ScrapeOrchestrator:
    """Create scrape orchestrator wired to the configured search and fetch clients."""
    return ScrapeOrchestrator(
        discovery=CandidateDiscovery(create_search_client()),
        fetch_backend=create_fetch_client(),
        max_concurrency=settings.scrape_max_concurrency,
        fetch_delay_seconds=settings.fetch_delay_seconds,
        fetch_timeout_seconds=settings.fetch_timeout_seconds,
    )
