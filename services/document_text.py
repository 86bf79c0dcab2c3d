# WORKFLOW: Conversion of fetched documents (HTML, PDF, Word, plain text) into text passages.
# Used by: Fetch client after a successful download
# Functions:
# 1. detect_document_type() - Decide the format from URL suffix and content type
# 2. html_to_page() - Tables/paragraphs/sections as passages, publish date from markup
# 3. pdf_to_page() - Page text via pypdf, split into paragraphs
# 4. word_to_page() - Paragraph and table text of .docx files via python-docx
# 5. text_to_page() - Plain text split on blank lines
# 6. build_page() - Dispatch on document type
#
# Conversion flow: Raw bytes -> Type detection -> Format parser -> FetchedPage
# Legacy binary .doc files and parser failures raise ExtractionError.

import io
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from docx import Document
from pypdf import PdfReader

from core.exceptions import ExtractionError

logger = logging.getLogger(__name__)

HTML = "html"
PDF = "pdf"
TEXT = "text"
WORD = "word"
LEGACY_WORD = "doc"

WORD_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PASSAGE_SELECTORS = ("table", "p, div.content, article, section")
PUBLISH_DATE_SELECTORS = (
    "time",
    ".publish-date",
    ".date",
    "[datetime]",
    "meta[property='article:published_time']",
)
BLANK_LINE_PATTERN = re.compile(r"\n\s*\n")


@dataclass
class FetchedPage:
    """Text content of one fetched candidate."""

    url: str
    text: str
    passages: List[str] = field(default_factory=list)
    title: Optional[str] = None
    publish_date: Optional[str] = None
    content_type: str = HTML


def detect_document_type(url: str, content_type: Optional[str] = None) -> str:
    """Detect document type from URL path suffix, then the Content-Type header."""
    path = (urlparse(url).path or "").lower()
    if path.endswith(".pdf"):
        return PDF
    if path.endswith(".docx"):
        return WORD
    if path.endswith(".doc"):
        return LEGACY_WORD

    mime = (content_type or "").split(";")[0].strip().lower()
    if mime == "application/pdf":
        return PDF
    if mime == WORD_MIME_TYPE:
        return WORD
    if mime == "application/msword":
        return LEGACY_WORD
    if mime == "text/plain":
        return TEXT
    return HTML


def html_to_page(url: str, html: str) -> FetchedPage:
    soup = BeautifulSoup(html, "html.parser")

    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    passages: List[str] = []
    for selector in PASSAGE_SELECTORS:
        for element in soup.select(selector):
            text = element.get_text(" ", strip=True)
            # Paragraphs inside an already selected article/section add nothing
            if text and not any(text in passage for passage in passages):
                passages.append(text)

    title = None
    if soup.title and soup.title.string:
        title = soup.title.string.strip() or None

    return FetchedPage(
        url=url,
        text=soup.get_text("\n"),
        passages=passages,
        title=title,
        publish_date=_extract_publish_date(soup),
        content_type=HTML,
    )


def _extract_publish_date(soup: BeautifulSoup) -> Optional[str]:
    """Extract publish date from HTML markup."""
    for selector in PUBLISH_DATE_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue

        # Try text, then the usual attributes
        for value in (element.get_text(strip=True), element.get("datetime"), element.get("content")):
            if value and value.strip():
                return value.strip()

    return None


def pdf_to_page(url: str, data: bytes) -> FetchedPage:
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        raise ExtractionError(url, f"unreadable PDF: {e}") from e

    text = "\n\n".join(pages)
    logger.debug(f"Extracted {len(text)} characters from PDF {url}")

    title = None
    try:
        title = str((reader.metadata or {}).get("/Title", "")).strip() or None
    except Exception:
        title = None

    return FetchedPage(
        url=url,
        text=text,
        passages=_split_paragraphs(text),
        title=title,
        content_type=PDF,
    )


def word_to_page(url: str, data: bytes) -> FetchedPage:
    """
    Extract text from a .docx document.

    Each non-empty paragraph is a passage; each table row becomes one
    passage with its cells joined by spaces.
    """
    try:
        document = Document(io.BytesIO(data))
    except Exception as e:
        raise ExtractionError(url, f"unreadable Word document: {e}") from e

    passages = [paragraph.text.strip() for paragraph in document.paragraphs if paragraph.text.strip()]
    for table in document.tables:
        for row in table.rows:
            row_text = " ".join(cell.text.strip() for cell in row.cells if cell.text.strip())
            if row_text:
                passages.append(row_text)

    text = "\n\n".join(passages)
    logger.debug(f"Extracted {len(text)} characters from Word document {url}")

    return FetchedPage(
        url=url,
        text=text,
        passages=passages,
        title=(document.core_properties.title or "").strip() or None,
        content_type=WORD,
    )


def text_to_page(url: str, text: str) -> FetchedPage:
    return FetchedPage(url=url, text=text, passages=_split_paragraphs(text), content_type=TEXT)


def _split_paragraphs(text: str) -> List[str]:
    return [chunk for chunk in BLANK_LINE_PATTERN.split(text) if chunk.strip()]


def build_page(url: str, body: bytes, content_type: Optional[str] = None, encoding: Optional[str] = None) -> FetchedPage:
    """
    Convert a downloaded body into a FetchedPage.

    Args:
        url: URL the body was fetched from
        body: Raw response bytes
        content_type: Content-Type header, if any
        encoding: Charset to decode text formats with

    Returns:
        FetchedPage with text and passages
    """
    document_type = detect_document_type(url, content_type)

    if document_type == LEGACY_WORD:
        raise ExtractionError(url, "legacy Word (.doc) documents are not supported")
    if document_type == WORD:
        return word_to_page(url, body)
    if document_type == PDF:
        return pdf_to_page(url, body)

    decoded = body.decode(encoding or "utf-8", errors="replace")
    if document_type == TEXT:
        return text_to_page(url, decoded)

    try:
        return html_to_page(url, decoded)
    except Exception as e:
        raise ExtractionError(url, f"unparsable HTML: {e}") from e
