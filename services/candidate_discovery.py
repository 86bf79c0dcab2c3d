# WORKFLOW: Candidate discovery: query -> ranked, bounded, de-duplicated URLs.
# Used by: Scrape orchestrator (first step of every job)
# Functions:
# 1. build_query_variations() - Tariff-flavoured variants of the user query
# 2. rank_candidates() - Trusted sources first, provider order kept within each tier
# 3. CandidateDiscovery.discover() - Run variations until enough distinct URLs are found
#
# Discovery flow: Query -> Variations -> Search calls -> Dedupe -> Bound -> Rank
# A failing search call fails discovery as a whole; no partial candidate list is returned.

import logging
from typing import List, Sequence

from core.exceptions import DiscoveryUnavailableError, SearchFailedError
from services.search_client import SearchBackend, SearchHit
from services.url_trust import is_trusted_source
from services.user_agents import fix_encoding

logger = logging.getLogger(__name__)

# Search query variations to get better results
QUERY_VARIATIONS = (
    "{} tariff rate",
    "{} import duty",
    "{} customs tariff",
    "{} trade tariff",
)


def build_query_variations(query: str) -> List[str]:
    base = " ".join(query.split())
    return [variation.format(base) for variation in QUERY_VARIATIONS]


def rank_candidates(hits: Sequence[SearchHit]) -> List[SearchHit]:
    """Order trusted-domain hits ahead of the rest (stable)."""
    return sorted(hits, key=lambda hit: 0 if is_trusted_source(hit.url) else 1)


class CandidateDiscovery:
    """Turns a free-text query into a list of candidate documents."""

    def __init__(self, search_backend: SearchBackend):
        self.search_backend = search_backend

    async def discover(self, query: str, max_results: int) -> List[SearchHit]:
        """
        Discover candidate documents for a query.

        Args:
            query: Free-text query (e.g., "USA steel")
            max_results: Upper bound on returned candidates

        Returns:
            Distinct candidates, trusted sources first
        """
        logger.info(f"Discovering candidates for: {query}")

        seen_urls = set()
        candidates: List[SearchHit] = []

        for variation in build_query_variations(query):
            if len(candidates) >= max_results:
                break

            try:
                batch = await self.search_backend.search(variation, max_results - len(candidates))
            except SearchFailedError as e:
                raise DiscoveryUnavailableError(f"Search failed: {e}") from e
            except Exception as e:
                logger.error(f"Search backend error for '{variation}': {e}")
                raise DiscoveryUnavailableError(f"Search backend unavailable: {e}") from e

            for hit in batch:
                key = fix_encoding(hit.url)
                if key in seen_urls or len(candidates) >= max_results:
                    continue
                seen_urls.add(key)
                candidates.append(hit)

        ranked = rank_candidates(candidates)
        logger.info(f"Discovery completed. Found {len(ranked)} unique candidates")
        return ranked
