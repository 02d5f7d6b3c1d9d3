"""
DOCX raw-text extraction via python-docx: paragraphs and tables in document order,
separated by blank lines. Table rows become "cell | cell | cell".
"""
import io
import logging

from docx import Document as DocxDocument
from docx.table import Table

from docintake.services.errors import DecodeError

logger = logging.getLogger(__name__)


def _table_text(table: Table) -> str:
    rows_text: list[str] = []
    for row in table.rows:
        cells = [cell.text.strip() for cell in row.cells]
        if any(cells):
            rows_text.append(" | ".join(cells))
    return "\n".join(rows_text)


def extract_text_from_docx(data: bytes) -> str:
    """Whole-document raw text. Raises DecodeError if the bytes are not a readable .docx."""
    try:
        doc = DocxDocument(io.BytesIO(data))
    except Exception as e:
        raise DecodeError(f"DOCX could not be read: {e!s}") from e
    parts: list[str] = []
    for block in doc.iter_inner_content():
        text = _table_text(block) if isinstance(block, Table) else block.text
        if text.strip():
            parts.append(text)
    logger.debug("extract_text_from_docx: blocks=%s", len(parts))
    return "\n\n".join(parts)
