# WORKFLOW: Web search client used to discover candidate documents.
# Used by: Candidate discovery
# Functions:
# 1. GoogleSearchClient.search() - One Google Custom Search API call
# 2. parse_search_response() - Map the JSON payload to SearchHit records
# 3. create_search_client() - Factory wired to application settings
#
# Search flow: Query -> Config check -> HTTP GET -> JSON parse -> SearchHit list
# Every failure (missing config, transport, HTTP status, API error payload) raises SearchFailedError.

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

import httpx

from core.config import settings
from core.exceptions import SearchFailedError

logger = logging.getLogger(__name__)

# Google Custom Search returns at most 10 items per call
MAX_RESULTS_PER_CALL = 10


@dataclass(frozen=True)
class SearchHit:
    url: str
    title: str


class SearchBackend(Protocol):
    async def search(self, query: str, limit: int) -> List[SearchHit]:
        ...


def parse_search_response(payload: Dict[str, Any]) -> List[SearchHit]:
    """
    Parse Google Search JSON response.

    Args:
        payload: Decoded JSON body

    Returns:
        Search hits in provider order
    """
    if "items" not in payload:
        if "error" in payload:
            error = payload["error"]
            message = error.get("message", "Unknown error") if isinstance(error, dict) else str(error)
            raise SearchFailedError(f"Google API error: {message}")

        logger.warning("No items found in search response")
        return []

    results = []
    for item in payload["items"]:
        url = item.get("link")
        title = item.get("title")
        if url and title:
            results.append(SearchHit(url=url, title=title))

    logger.debug(f"Parsed {len(results)} search results")
    return results


class GoogleSearchClient:
    """Google Custom Search JSON API client."""

    def __init__(
        self,
        api_key: str,
        engine_id: str,
        base_url: str = "https://www.googleapis.com/customsearch/v1",
        date_restrict: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.engine_id = engine_id
        self.base_url = base_url
        self.date_restrict = date_restrict
        self.timeout = timeout
        self.client = client

    def _validate_configuration(self) -> None:
        if not self.api_key or not self.engine_id:
            raise SearchFailedError(
                "Google Search API is not configured. "
                "Please set GOOGLE_SEARCH_API_KEY and GOOGLE_SEARCH_ENGINE_ID"
            )

    def _params(self, query: str, limit: int) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "key": self.api_key,
            "cx": self.engine_id,
            "q": query,
            "num": max(1, min(limit, MAX_RESULTS_PER_CALL)),
        }
        if self.date_restrict:
            params["dateRestrict"] = self.date_restrict
        return params

    async def search(self, query: str, limit: int) -> List[SearchHit]:
        """Execute a single search call."""
        self._validate_configuration()
        logger.debug(f"Executing search: {query}")

        try:
            if self.client is not None:
                response = await self.client.get(self.base_url, params=self._params(query, limit), timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(self.base_url, params=self._params(query, limit))
        except httpx.HTTPError as e:
            logger.error(f"Search API call failed: {e}")
            raise SearchFailedError(f"Failed to execute search: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Failed to parse search response: {e}")
            raise SearchFailedError("Failed to parse search results") from e

        if not isinstance(payload, dict):
            raise SearchFailedError("Unexpected search response shape")

        if response.status_code >= 400 and "error" not in payload:
            raise SearchFailedError(f"Search API returned HTTP {response.status_code}")

        return parse_search_response(payload)


def create_search_client() -> GoogleSearchClient:
    """Create search client instance."""
    return GoogleSearchClient(
        api_key=settings.google_search_api_key,
        engine_id=settings.google_search_engine_id,
        base_url=settings.google_search_url,
        date_restrict=settings.google_search_date_restrict,
        timeout=settings.search_timeout_seconds,
    )
