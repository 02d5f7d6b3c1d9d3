"""
OCR abstraction: transcribe(image_bytes, mime_type) -> text.
Gemini when GEMINI_API_KEY is set; mock placeholder text otherwise.
"""
import logging

from docintake.llm.base import OcrService

logger = logging.getLogger(__name__)


def get_ocr_service():
    """Return Gemini OCR service; mock only if the API key is missing."""
    from docintake.llm.gemini_impl import get_gemini_api_key
    if not get_gemini_api_key():
        logger.warning("GEMINI_API_KEY not set; using mock OCR.")
        from docintake.llm.mock_impl import get_mock_ocr_service
        return get_mock_ocr_service()
    from docintake.llm.gemini_impl import get_ocr_service as _get_gemini
    return _get_gemini()


__all__ = ["OcrService", "get_ocr_service"]
