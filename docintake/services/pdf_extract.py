"""
PDF text-layer extraction (embedded text only, no OCR).
Pages are walked in order 1..N; each page's text items are joined with single spaces and
pages are newline-terminated. No re-sorting: the content stream order is kept.
"""
import logging

import pymupdf

from docintake.services.errors import DecodeError

logger = logging.getLogger(__name__)


def open_pdf(data: bytes) -> "pymupdf.Document":
    """Open PDF bytes. Raises DecodeError on empty, corrupt or non-PDF input."""
    if not data:
        raise DecodeError("PDF is empty")
    try:
        doc = pymupdf.open(stream=data, filetype="pdf")
    except Exception as e:
        raise DecodeError(f"PDF could not be read: {e!s}") from e
    if doc.needs_pass:
        doc.close()
        raise DecodeError("PDF is password-protected")
    return doc


def page_text(page: "pymupdf.Page") -> str:
    """Text items (words) of one page joined by single spaces."""
    words = page.get_text("words")
    return " ".join(w[4] for w in words)


def extract_text_layer(doc: "pymupdf.Document") -> tuple[str, int]:
    """Return (full_text, page_count). Each page contributes its text plus a newline."""
    page_count = len(doc)
    parts: list[str] = []
    try:
        for i in range(page_count):
            parts.append(page_text(doc[i]) + "\n")
    except Exception as e:
        raise DecodeError(f"text layer of page {len(parts) + 1} could not be read: {e!s}") from e
    full_text = "".join(parts)
    logger.debug("extract_text_layer: pages=%s chars=%s", page_count, len(full_text))
    return full_text, page_count


def extract_text_from_pdf(data: bytes) -> tuple[str, int]:
    """Open + extract text layer in one call."""
    with open_pdf(data) as doc:
        return extract_text_layer(doc)
