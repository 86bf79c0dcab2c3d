# WORKFLOW: Shared fixtures for the scraper test suite.
# Used by: Orchestrator, discovery and API tests
# Fixtures:
# 1. make_orchestrator - Orchestrator wired to in-memory search and fetch backends
# 2. relevant_page / irrelevant_page - FetchedPage builders
#
# No test touches the network: search and fetch are replaced by fakes that record their calls.

import asyncio
from typing import Dict, List, Optional, Union

import pytest

from core.exceptions import SourceFetchError
from services.candidate_discovery import CandidateDiscovery
from services.document_text import FetchedPage
from services.scrape_orchestrator import ScrapeOrchestrator
from services.search_client import SearchHit
from services.user_agents import UserAgentPool

RELEVANT_TEXT = (
    "Published: 2024. The United States imposed a 25% tariff on steel imports "
    "from China under Section 232 of the Trade Expansion Act."
)
IRRELEVANT_TEXT = "Weather report for today: sunny with scattered clouds across the region."


class FakeSearchBackend:
    """Returns one queued batch per call; empty batches once the queue runs out."""

    def __init__(self, batches: Optional[List[List[SearchHit]]] = None, error: Optional[Exception] = None):
        self.batches = list(batches or [])
        self.error = error
        self.calls = []

    async def search(self, query: str, limit: int) -> List[SearchHit]:
        self.calls.append((query, limit))
        if self.error is not None:
            raise self.error
        return self.batches.pop(0) if self.batches else []


class FakeFetchBackend:
    """Serves pages by URL; unknown URLs fail like a 404."""

    def __init__(
        self,
        pages: Optional[Dict[str, Union[FetchedPage, Exception]]] = None,
        delays: Optional[Dict[str, float]] = None,
    ):
        self.pages = pages or {}
        self.delays = delays or {}
        self.calls = []
        self.active = 0
        self.max_active = 0

    async def fetch(self, url: str, user_agent: str) -> FetchedPage:
        self.calls.append((url, user_agent))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(url, 0))
            outcome = self.pages.get(url)
            if outcome is None:
                raise SourceFetchError(url, "HTTP 404")
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        finally:
            self.active -= 1


def make_hits(*urls: str) -> List[SearchHit]:
    return [SearchHit(url=url, title=f"Result {index}") for index, url in enumerate(urls, start=1)]


@pytest.fixture
def hits():
    return make_hits


@pytest.fixture
def relevant_page():
    def _page(url: str, text: str = RELEVANT_TEXT, **kwargs) -> FetchedPage:
        return FetchedPage(url=url, text=text, passages=[text], **kwargs)
    return _page


@pytest.fixture
def irrelevant_page():
    def _page(url: str) -> FetchedPage:
        return FetchedPage(url=url, text=IRRELEVANT_TEXT, passages=[IRRELEVANT_TEXT])
    return _page


@pytest.fixture
def make_orchestrator():
    """Build an orchestrator plus the fakes behind it."""

    def _make(batches=None, pages=None, search_error=None, delays=None, **kwargs):
        search = FakeSearchBackend(batches, error=search_error)
        fetch = FakeFetchBackend(pages, delays=delays)
        kwargs.setdefault("user_agents", UserAgentPool.seeded(7))
        orchestrator = ScrapeOrchestrator(CandidateDiscovery(search), fetch, **kwargs)
        return orchestrator, search, fetch

    return _make
