# WORKFLOW: Pydantic request schemas for API input validation.
# Used by: Scrape endpoints and the scrape orchestrator
# Schemas include:
# 1. ScrapeRequest - Query, result bound and minimum year for one scrape job
# 2. build_scrape_request() - Construct a ScrapeRequest or raise field-level errors
#
# Validation flow: HTTP request -> ScrapeRequest validation -> Orchestrator
# Invalid values never produce a job.

from typing import Dict, Optional

from pydantic import BaseModel, Field, ValidationError, validator
from pydantic.alias_generators import to_camel

from core.exceptions import ScrapeRequestValidationError

DEFAULT_MAX_RESULTS = 10
DEFAULT_MIN_YEAR = 2020

FIELD_MESSAGES = {
    "query": "Query must be between 2 and 200 characters",
    "maxResults": "Maximum results must be between 1 and 50",
    "minYear": "Minimum year must be between 2000 and 2030",
}
FIELD_ALIASES = {"max_results": "maxResults", "min_year": "minYear"}


class ScrapeRequest(BaseModel):
    """Request schema for scrape jobs."""
    query: str = Field(..., min_length=2, max_length=200, description="Free-text search query")
    max_results: int = Field(DEFAULT_MAX_RESULTS, ge=1, le=50, description="Maximum candidates to discover")
    min_year: int = Field(DEFAULT_MIN_YEAR, ge=2000, le=2030, description="Oldest year accepted in results")

    class Config:
        frozen = True
        populate_by_name = True
        alias_generator = to_camel
        json_schema_extra = {
            "example": {
                "query": "USA steel",
                "maxResults": 10,
                "minYear": 2024,
            }
        }

    @validator("query")
    def validate_query(cls, v):
        if not v.strip():
            raise ValueError("Query is required")
        return v


def build_scrape_request(
    query: Optional[str],
    max_results: Optional[int] = None,
    min_year: Optional[int] = None,
) -> ScrapeRequest:
    """
    Build a validated scrape request.

    Args:
        query: Free-text query
        max_results: Candidate bound (default 10)
        min_year: Minimum accepted year (default 2020)

    Returns:
        Frozen ScrapeRequest

    Raises:
        ScrapeRequestValidationError: With one message per invalid field
    """
    data = {"query": query}
    if max_results is not None:
        data["maxResults"] = max_results
    if min_year is not None:
        data["minYear"] = min_year

    try:
        return ScrapeRequest(**data)
    except ValidationError as e:
        raise ScrapeRequestValidationError(_field_errors(e)) from e


def _field_errors(error: ValidationError) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for item in error.errors():
        loc = item.get("loc") or ("request",)
        field = FIELD_ALIASES.get(str(loc[0]), str(loc[0]))
        if field in errors:
            continue
        if field == "query" and item.get("type") in ("missing", "string_type", "value_error"):
            errors[field] = "Query is required"
        elif item.get("type") in ("int_parsing", "int_type", "int_from_float"):
            errors[field] = f"{field} must be an integer"
        else:
            errors[field] = FIELD_MESSAGES.get(field, item.get("msg", "Invalid value"))
    return errors
