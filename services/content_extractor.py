# WORKFLOW: Text heuristics for tariff facts in scraped documents.
# Used by: Scrape orchestrator (relevance filter and fact extraction)
# Functions:
# 1. contains_tariff_keywords() - Relevance filter for fetched text
# 2. extract_rate() - Parse the first percentage figure
# 3. extract_year_from_text() - Contextual year first, generic recent year second
# 4. clean_text() - Collapse whitespace
# 5. select_relevant_passages() - Keep tariff-bearing blocks of a document
# 6. year_from_date() - Year inside a publish-date string
# 7. extract_trade_parties() - Exporter/importer from fixed country vocabulary
# 8. extract_product() - Product named after "tariffs on ..."
#
# Extraction flow: Fetched text -> Clean -> Relevance filter -> Rate/year/parties/product
# All functions are pure: no I/O, no shared state, safe on None input.

"""
Text heuristics for extracting tariff facts from scraped documents.
"""

import re
from typing import Iterable, List, Optional, Tuple

TARIFF_KEYWORDS = ("tariff", "duty rate", "customs duty", "import duty")

RATE_PATTERN = re.compile(r"(\d+\.?\d*)\s*(%|percent|per cent)", re.IGNORECASE)
YEAR_PATTERN = re.compile(
    r"(?:published|updated|effective|dated|as of|©|copyright)\s*:?\s*(20\d{2})(?!\d)",
    re.IGNORECASE,
)
GENERIC_YEAR_PATTERN = re.compile(r"\b(202[0-9])\b")
DATE_YEAR_PATTERN = re.compile(r"\b(20\d{2})\b")
WHITESPACE_PATTERN = re.compile(r"\s+")
SENTENCE_SPLIT_PATTERN = re.compile(r"(?<=[.!?])\s+")

# Canonical country names keyed by the spellings accepted in text
COUNTRY_ALIASES = {
    "United States": "United States",
    "U.S.": "United States",
    "US": "United States",
    "USA": "United States",
    "America": "United States",
    "Washington": "United States",
    "China": "China",
    "Beijing": "China",
    "European Union": "European Union",
    "EU": "European Union",
    "Brussels": "European Union",
    "United Kingdom": "United Kingdom",
    "UK": "United Kingdom",
    "Britain": "United Kingdom",
    "Canada": "Canada",
    "Ottawa": "Canada",
    "Mexico": "Mexico",
    "Japan": "Japan",
    "Tokyo": "Japan",
    "South Korea": "South Korea",
    "Korea": "South Korea",
    "India": "India",
    "New Delhi": "India",
    "Brazil": "Brazil",
    "Australia": "Australia",
    "Germany": "Germany",
    "France": "France",
    "Italy": "Italy",
    "Spain": "Spain",
    "Netherlands": "Netherlands",
    "Russia": "Russia",
    "Turkey": "Turkey",
    "Vietnam": "Vietnam",
    "Indonesia": "Indonesia",
    "Thailand": "Thailand",
    "Malaysia": "Malaysia",
    "Singapore": "Singapore",
    "Philippines": "Philippines",
    "Taiwan": "Taiwan",
    "Switzerland": "Switzerland",
    "Argentina": "Argentina",
    "Chile": "Chile",
    "South Africa": "South Africa",
    "Saudi Arabia": "Saudi Arabia",
    "Pakistan": "Pakistan",
    "Bangladesh": "Bangladesh",
    "New Zealand": "New Zealand",
}

_COUNTRY = "(?<![A-Za-z])({})(?![A-Za-z])".format(
    "|".join(re.escape(name) for name in sorted(COUNTRY_ALIASES, key=len, reverse=True))
)
EXPORTER_PATTERNS = (
    re.compile(r"(?:imports?|goods|products|shipments) from (?:the )?" + _COUNTRY),
    re.compile(_COUNTRY + r"(?:'s)? exports"),
)
IMPORTER_PATTERNS = (
    re.compile(
        _COUNTRY
        + r" (?:has |have |will |would |is |plans to )?"
        r"(?:impose[sd]?|imposing|raise[sd]?|raising|announce[sd]?|levie[sd]|levy|levying|slap(?:s|ped)?|hike[sd]?)\b"
    ),
    re.compile(r"(?:imposed|levied|announced|introduced) by (?:the )?" + _COUNTRY),
)

PRODUCT_PATTERN = re.compile(
    r"\b(?:tariffs?|duties|duty) on (?:imported |imports of )?([a-z][a-z\-]+(?: [a-z][a-z\-]*){0,2})",
    re.IGNORECASE,
)
PRODUCT_STOPWORDS = {
    "from", "by", "to", "in", "at", "of", "and", "or", "will", "would", "starting",
    "as", "for", "that", "which", "is", "are", "was", "were", "with", "the", "a", "an",
}
PRODUCT_TRAILING = {"imports", "import", "products", "goods"}


def contains_tariff_keywords(text: Optional[str]) -> bool:
    """
    Check if text contains tariff-related keywords.

    A bare "rate" only counts when a percentage accompanies it.
    """
    if text is None:
        return False

    lower = text.lower()
    if any(keyword in lower for keyword in TARIFF_KEYWORDS):
        return True
    return "rate" in lower and ("%" in lower or "percent" in lower)


def extract_rate(text: Optional[str]) -> Optional[float]:
    """
    Extract tariff rate percentage from text.

    Args:
        text: Text to search (e.g., "Tariff rate: 12.5%")

    Returns:
        Parsed magnitude of the first percentage figure, or None
    """
    if text is None:
        return None

    match = RATE_PATTERN.search(text)
    if not match:
        return None

    try:
        return float(match.group(1))
    except ValueError:
        return None


def extract_year_from_text(text: Optional[str]) -> Optional[str]:
    """
    Extract year from document content.

    Contextual cues ("Published: 2022", "© 2023") take priority over any
    generic year, even one appearing earlier in the text. The generic
    fallback only accepts 2020-2029.
    """
    if text is None:
        return None

    match = YEAR_PATTERN.search(text)
    if match:
        return match.group(1)

    match = GENERIC_YEAR_PATTERN.search(text)
    if match:
        return match.group(1)

    return None


def clean_text(text: Optional[str]) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    if text is None:
        return ""
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def select_relevant_passages(passages: Iterable[str], min_length: int = 50) -> List[str]:
    """
    Select cleaned, tariff-bearing passages in document order.

    Short blocks (navigation, captions) are skipped. When no block
    qualifies, keyword-bearing sentences of the whole text are used instead.

    Args:
        passages: Raw text blocks (tables, paragraphs, sections)
        min_length: Minimum cleaned length for a block to count

    Returns:
        De-duplicated list of relevant passages
    """
    blocks = [clean_text(passage) for passage in passages]

    selected: List[str] = []
    seen = set()
    for block in blocks:
        if len(block) > min_length and contains_tariff_keywords(block) and block not in seen:
            selected.append(block)
            seen.add(block)

    if selected:
        return selected

    for sentence in SENTENCE_SPLIT_PATTERN.split(clean_text(" ".join(blocks))):
        if sentence and contains_tariff_keywords(sentence) and sentence not in seen:
            selected.append(sentence)
            seen.add(sentence)

    return selected


def year_from_date(value: Optional[str]) -> Optional[str]:
    """Return the first 20xx year inside a publish-date string."""
    if not value:
        return None
    match = DATE_YEAR_PATTERN.search(value)
    return match.group(1) if match else None


def _first_country(patterns, text: str) -> Optional[str]:
    best = None
    for pattern in patterns:
        match = pattern.search(text)
        if match and (best is None or match.start() < best.start()):
            best = match
    if best is None:
        return None
    return COUNTRY_ALIASES[best.group(1)]


def extract_trade_parties(text: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Extract exporter and importer countries from text.

    Args:
        text: Cleaned document text

    Returns:
        (exporter, importer) canonical country names, either may be None
    """
    if not text:
        return None, None

    exporter = _first_country(EXPORTER_PATTERNS, text)
    importer = _first_country(IMPORTER_PATTERNS, text)
    return exporter, importer


def extract_product(text: Optional[str]) -> Optional[str]:
    """Extract the product named after "tariffs on", e.g. "steel"."""
    if not text:
        return None

    for match in PRODUCT_PATTERN.finditer(text):
        words = []
        for word in match.group(1).lower().split():
            if word in PRODUCT_STOPWORDS:
                break
            words.append(word)

        while words and words[-1] in PRODUCT_TRAILING:
            words.pop()

        if words:
            return " ".join(words)

    return None
