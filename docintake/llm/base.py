"""
OCR service interface: image bytes + mime type → plaintext transcription.
"""
from typing import Protocol


class OcrService(Protocol):
    """Vision transcription boundary. One call per page/image."""

    async def transcribe(self, image: bytes, mime_type: str) -> str:
        """
        Return the text found in the image. Lenient implementations return "" when the
        call fails; strict ones raise TranscriptionFailure.
        """
        ...
