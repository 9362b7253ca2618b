"""PDF extraction: page sources, canonical text and title metadata."""

from __future__ import annotations

import unicodedata
from pathlib import Path
from typing import Final, Iterator, Optional, Protocol, Sequence

from loguru import logger
from pdfminer.high_level import extract_pages
from pdfminer.layout import LTTextContainer
from pdfminer.pdfdocument import PDFDocument
from pdfminer.pdfparser import PDFParser
from pdfminer.pdftypes import resolve1
from pdfminer.utils import decode_text

from paperseg.models import Paper
from paperseg.text_clean import clean_text

# Library modules stay quiet unless the CLI enables them
logger.disable("paperseg")


PAGE_SEPARATOR: Final[str] = "\n\n"
PARSE_FAILED_MESSAGE: Final[str] = "Failed to parse PDF file; please confirm the file format is correct"


class PdfParseError(RuntimeError):
    """Raised when the page source cannot be read."""


class PageSource(Protocol):
    """Anything that yields raw text page by page, in order."""

    def iter_pages(self) -> Iterator[str]: ...


class TextPages:
    """Page source over strings already in memory."""

    def __init__(self, pages: Sequence[str]):
        self._pages = list(pages)

    def iter_pages(self) -> Iterator[str]:
        yield from self._pages


def _layout_text(layout) -> str:
    return "".join(el.get_text() for el in layout if isinstance(el, LTTextContainer))


class PdfMinerPageSource:
    """
    Page source backed by pdfminer.six (best for two-column layouts).

    Args:
        pdf_path: PDF file to read
        max_pages: Read at most this many pages (None = all pages)
    """

    def __init__(self, pdf_path: Path | str, max_pages: int | None = None):
        self.pdf_path = Path(pdf_path)
        self.max_pages = max_pages

    def iter_pages(self) -> Iterator[str]:
        """Stream page texts in a single pass over the document."""
        for layout in extract_pages(str(self.pdf_path), maxpages=self.max_pages or 0):
            yield _layout_text(layout)


def extract_text(source: PageSource) -> str:
    """
    Read every page, join with blank lines and canonicalize.

    Raises: PdfParseError if the source fails on any page
    """
    pages: list[str] = []
    try:
        pages.extend(source.iter_pages())
    except Exception as e:
        raise PdfParseError(PARSE_FAILED_MESSAGE) from e
    return clean_text(PAGE_SEPARATOR.join(pages))


def _is_suspicious_title(title: str) -> bool:
    """Check if extracted title looks like extraction garbage."""
    t = unicodedata.normalize("NFKC", title).strip()
    if not t or t.lower() in {"untitled", "title"}:
        return True

    # Lots of single-letter tokens indicates bad extraction
    tokens = t.split()
    single_letter = sum(1 for tok in tokens if len(tok) == 1 and tok.isalpha())
    return single_letter / max(len(tokens), 1) > 0.35


def _title_from_metadata(pdf_path: Path) -> Optional[str]:
    """Read /Title from the PDF Info dictionary."""
    try:
        with open(pdf_path, "rb") as f:
            document = PDFDocument(PDFParser(f))
            for info in document.info:
                raw = resolve1(info.get("Title"))
                if isinstance(raw, bytes):
                    return decode_text(raw).strip()
                if isinstance(raw, str):
                    return raw.strip()
    except Exception as e:
        logger.debug(f"Could not read metadata of {pdf_path.name}: {e}")
    return None


def extract_paper_from_pdf(pdf_path: Path, max_pages: int | None = None) -> Paper:
    """
    Extract title + canonical text from a PDF.

    Title comes from PDF metadata when it looks sane, else the filename.

    Raises: PdfParseError if pdfminer cannot read the pages
    """
    title = _title_from_metadata(pdf_path)
    if not title or _is_suspicious_title(title):
        title = pdf_path.stem.replace("_", " ").strip()

    text = extract_text(PdfMinerPageSource(pdf_path, max_pages=max_pages))
    return Paper(pdf_path=pdf_path, title=title, text=text)
