# WORKFLOW: Error hierarchy for the scrape pipeline.
# Used by: Search/fetch clients, candidate discovery, orchestrator, API error handlers
# Errors:
# 1. ScrapeRequestValidationError - Request bounds violated (pre-flight, no job created)
# 2. SearchFailedError - Search provider unreachable, misconfigured or returned an error
# 3. DiscoveryUnavailableError - Discovery failed; job-fatal, carries the FAILED report
# 4. SourceFetchError - One candidate could not be fetched (recorded, job continues)
# 5. ExtractionError - One fetched candidate could not be converted to text (recorded)
# 6. JobFatalError - Every candidate failed; carries the FAILED report
# 7. ReportValidationError - A finished report failed the JSON schema gate
#
# Propagation: pre-flight/discovery errors abort the job, per-candidate errors are
# absorbed into the job report, JobFatalError is raised only at finalize.

from typing import Any, Dict, Optional


class ScraperError(Exception):
    """Base exception for scraper-related errors."""


class ScrapeRequestValidationError(ScraperError):
    """Raised when scrape request parameters are out of bounds."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        details = "; ".join(f"{field}: {message}" for field, message in errors.items())
        super().__init__(f"Invalid scrape request: {details}")


class SearchFailedError(ScraperError):
    """Raised when the search provider call fails."""


class DiscoveryUnavailableError(ScraperError):
    """Raised when candidate discovery fails as a whole."""

    def __init__(self, message: str, report: Optional[Any] = None):
        super().__init__(message)
        self.report = report


class SourceFetchError(ScraperError):
    """Raised when a single candidate cannot be fetched."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class ExtractionError(ScraperError):
    """Raised when fetched content cannot be turned into text."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to extract {url}: {reason}")
        self.url = url
        self.reason = reason


class JobFatalError(ScraperError):
    """Raised when no candidate yielded a usable outcome."""

    def __init__(self, message: str, report: Optional[Any] = None):
        super().__init__(message)
        self.report = report


class ReportValidationError(ScraperError):
    """Raised when a finished job report fails the response schema gate."""

    def __init__(self, message: str, job_id: Optional[str] = None):
        super().__init__(message)
        self.job_id = job_id
