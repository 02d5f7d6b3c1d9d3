"""
Ingestion error taxonomy. Library exceptions (PyMuPDF, Pillow, python-docx) are wrapped
into these at the boundary where the format is parsed; the coordinator turns any of them
into the file's error status.
"""


class IngestionError(Exception):
    """Base class for failures while turning one uploaded file into plaintext."""


class DecodeError(IngestionError):
    """Byte stream could not be parsed as the dispatched format (corrupt PDF/DOCX/image)."""


class RenderError(IngestionError):
    """PDF page → pixel rasterization failed."""


class TranscriptionFailure(IngestionError):
    """OCR call failed, timed out or returned nothing. Raised only in strict OCR mode."""


class UnsupportedFormat(IngestionError):
    """Binary payload with no known extractor (only when reject_binary_other is enabled)."""


class IngestionCancelled(IngestionError):
    """Batch was cancelled before this file finished."""


class InvalidTransition(Exception):
    """Status change not allowed by queued → processing → {ready, error}."""
