"""Local PDF text extraction."""

import logging
from dataclasses import dataclass
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PyPdfError

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n--- Page {number} ---\n\n"


class PdfError(Exception):
    """The file is not a readable PDF."""

    pass


@dataclass
class PdfInfo:
    file: str
    size_bytes: int
    pages: int


def _open(path: Path) -> PdfReader:
    try:
        return PdfReader(path)
    except (PyPdfError, ValueError) as e:
        raise PdfError(f"Invalid or corrupted PDF {path}: {e}") from e


def extract_text(path: str | Path) -> str:
    """
    Extract plain text from every page.

    Pages after the first are preceded by a ``--- Page N ---`` separator.
    Pages without text or that fail to extract are skipped.
    """
    path = Path(path)
    reader = _open(path)

    text = ""
    for number, page in enumerate(reader.pages, start=1):
        try:
            page_text = page.extract_text() or ""
        except (PyPdfError, ValueError, KeyError) as e:
            logger.debug("Skipping page %d of %s: %s", number, path, e)
            continue
        if not page_text:
            continue
        if text:
            text += PAGE_SEPARATOR.format(number=number)
        text += page_text
    return text


def pdf_info(path: str | Path) -> PdfInfo:
    """Size and page count of a PDF."""
    path = Path(path)
    size = path.stat().st_size
    reader = _open(path)
    return PdfInfo(file=str(path), size_bytes=size, pages=len(reader.pages))
