"""
Mock OCR: returns placeholder text when GEMINI_API_KEY is not set.
Lets the ingestion pipeline run end-to-end offline.
"""
import hashlib
import logging

logger = logging.getLogger(__name__)


class MockOcrService:
    """Deterministic placeholder transcription keyed on the image bytes."""

    async def transcribe(self, image: bytes, mime_type: str) -> str:
        seed = hashlib.sha256(image).hexdigest()[:8]
        return f"[Mock OCR] {mime_type} image {seed} ({len(image)} bytes). Set GEMINI_API_KEY for real transcription."


def get_mock_ocr_service() -> MockOcrService:
    return MockOcrService()
