# WORKFLOW: Trusted-source classification for discovered URLs.
# Used by: Candidate discovery (ranking), orchestrator (source domain tagging)
# Functions:
# 1. extract_domain() - Return the trusted domain literal or the parsed host
# 2. is_trusted_source() - Check whether a URL belongs to an authoritative source
#
# Trust is a plain substring match against a fixed list of official trade sources.

import logging
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

# Trusted official sources for tariff data
TRUSTED_SOURCES = (
    "wto.org",
    "trade.gov",
    "usitc.gov",
    "cbp.gov",
    "worldbank.org",
    "comtrade.un.org",
    "oecd.org",
    "export.gov",
    "trade-tariff.service.gov.uk",
)

UNKNOWN_DOMAIN = "unknown"


def extract_domain(url: Optional[str]) -> str:
    """
    Extract the source domain of a URL.

    Trusted sources are reported by their canonical domain, so
    "https://www.wto.org/news" yields "wto.org" rather than "www.wto.org".

    Args:
        url: URL to inspect

    Returns:
        Trusted domain literal, parsed host, or "unknown"
    """
    if not url:
        return UNKNOWN_DOMAIN

    for domain in TRUSTED_SOURCES:
        if domain in url:
            return domain

    try:
        host = urlparse(url).hostname
    except ValueError as e:
        logger.debug(f"Could not parse URL '{url}': {e}")
        return UNKNOWN_DOMAIN

    return host or UNKNOWN_DOMAIN


def is_trusted_source(url: Optional[str]) -> bool:
    """Check if URL is from a trusted source."""
    if not url:
        return False
    return any(domain in url for domain in TRUSTED_SOURCES)
