# WORKFLOW: HTTP fetch client for candidate documents.
# Used by: Scrape orchestrator (one fetch per discovered candidate)
# Functions:
# 1. HttpFetchClient.fetch() - GET with browser headers and a per-fetch timeout
# 2. create_fetch_client() - Factory wired to application settings
#
# Fetch flow: URL + user agent -> HTTP GET -> Status check -> build_page() -> FetchedPage
# Timeouts, transport errors and non-success statuses raise SourceFetchError.

import logging
from typing import Optional, Protocol

import httpx

from core.config import settings
from core.exceptions import SourceFetchError
from services.document_text import FetchedPage, build_page

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,application/pdf;q=0.8,*/*;q=0.7"


class FetchBackend(Protocol):
    async def fetch(self, url: str, user_agent: str) -> FetchedPage:
        ...


class HttpFetchClient:
    """Fetches candidate documents over HTTP."""

    def __init__(
        self,
        timeout: float = 15.0,
        referrer: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.timeout = timeout
        self.referrer = referrer
        self.client = client

    def _headers(self, user_agent: str) -> dict:
        headers = {
            "User-Agent": user_agent,
            "Accept": ACCEPT_HEADER,
            "Accept-Language": "en-US,en;q=0.9",
            "Upgrade-Insecure-Requests": "1",
        }
        if self.referrer:
            headers["Referer"] = self.referrer
        return headers

    async def fetch(self, url: str, user_agent: str) -> FetchedPage:
        """
        Fetch a URL and convert it into text.

        Args:
            url: Candidate URL (already encoding-fixed)
            user_agent: Browser user agent to send

        Returns:
            FetchedPage with text and passages
        """
        logger.debug(f"Fetching {url}")

        try:
            if self.client is not None:
                response = await self._get(self.client, url, user_agent)
            else:
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    response = await self._get(client, url, user_agent)
        except httpx.TimeoutException as e:
            raise SourceFetchError(url, f"timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise SourceFetchError(url, f"{type(e).__name__}: {e}") from e

        if response.status_code >= 400:
            raise SourceFetchError(url, f"HTTP {response.status_code}")

        return build_page(
            url,
            response.content,
            content_type=response.headers.get("content-type"),
            encoding=response.encoding,
        )

    async def _get(self, client: httpx.AsyncClient, url: str, user_agent: str) -> httpx.Response:
        return await client.get(
            url,
            headers=self._headers(user_agent),
            timeout=self.timeout,
            follow_redirects=True,
        )


def create_fetch_client() -> HttpFetchClient:
    """Create fetch client instance."""
    return HttpFetchClient(
        timeout=settings.fetch_timeout_seconds,
        referrer=settings.fetch_referrer,
    )
