# WORKFLOW: JSON Schema validation module (final gate for job reports).
# Used by: Scrape endpoints, testing
# Functions:
# 1. validate_scrape_report() - Validate a ScrapeResponse against the JSON schema
# 2. SchemaValidator.get_validation_errors() - Get validation errors without raising
#
# Validation flow: Orchestrator report -> JSON dump (camelCase) -> Schema + count invariants -> Pass/Fail
# No report is returned to a caller without passing this validation.

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema

from api.schemas.response import ScrapeResponse
from core.exceptions import ReportValidationError

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent.parent.parent / "schema" / "scrape_response.schema.json"


class SchemaValidator:
    """JSON Schema validator for scrape job reports."""

    def __init__(self, schema_path: Path = SCHEMA_PATH):
        self.schema_path = schema_path
        self.schema = self._load_schema()

    def _load_schema(self) -> Dict[str, Any]:
        """Load the JSON schema from file."""
        try:
            with open(self.schema_path, "r") as f:
                return json.load(f)
        except Exception as e:
            logger.error(f"Failed to load JSON schema: {e}")
            raise

    def validate_response(self, response_data: Dict[str, Any]) -> bool:
        """
        Validate report data against the JSON schema and the count invariants.

        Raises:
            jsonschema.ValidationError: If the report is invalid
        """
        jsonschema.validate(instance=response_data, schema=self.schema)

        # Relations between fields are outside what the schema can express
        scraped = response_data["sourcesScraped"]
        if scraped > response_data["totalSourcesFound"]:
            raise jsonschema.ValidationError("sourcesScraped exceeds totalSourcesFound")
        if len(response_data["results"]) > scraped:
            raise jsonschema.ValidationError("results exceed sourcesScraped")

        urls = [item["url"] for item in response_data["results"]]
        if len(urls) != len(set(urls)):
            raise jsonschema.ValidationError("duplicate result URLs")

        logger.debug("Report validated successfully against JSON schema")
        return True

    def validate_pydantic_model(self, model: ScrapeResponse) -> bool:
        return self.validate_response(model.model_dump(mode="json", by_alias=True))

    def get_validation_errors(self, response_data: Dict[str, Any]) -> Optional[str]:
        """
        Get validation errors without raising.

        Returns:
            Error message if invalid, None if valid
        """
        try:
            self.validate_response(response_data)
            return None
        except jsonschema.ValidationError as e:
            return e.message


_validator: Optional[SchemaValidator] = None


def get_schema_validator() -> SchemaValidator:
    """Get the schema validator (lazy-loaded)."""
    global _validator
    if _validator is None:
        _validator = SchemaValidator()
    return _validator


def validate_scrape_report(report: ScrapeResponse) -> bool:
    """Validate a scrape job report; raises ReportValidationError if invalid."""
    try:
        return get_schema_validator().validate_pydantic_model(report)
    except jsonschema.ValidationError as e:
        logger.error(f"Schema validation failed for job {report.job_id}: {e.message}")
        raise ReportValidationError(f"Job report failed schema validation: {e.message}", job_id=report.job_id) from e
