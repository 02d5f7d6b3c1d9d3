"""
Gemini (Google) vision OCR via google.genai (async client).
Uses OCR_MODEL_NAME (e.g. gemini-2.5-flash) and GEMINI_API_KEY.
No retries: a failed page is reported once and, unless OCR_STRICT is set, becomes "".
"""
import asyncio
import logging
import os
import time

from docintake import metrics
from docintake.config import settings
from docintake.services.errors import TranscriptionFailure

logger = logging.getLogger(__name__)


OCR_PROMPT = """Act as a high-precision OCR engine.
Transcription task:
1. Extract ALL text from this image exactly as written.
2. Maintain structural layout.
3. Output ONLY the extracted text."""


def _get_api_key() -> str:
    """Resolve Gemini API key from settings or env. Never log the key."""
    return (
        getattr(settings, "gemini_api_key", "")
        or os.environ.get("GEMINI_API_KEY")
        or os.environ.get("GOOGLE_API_KEY")
        or ""
    ).strip()


def get_gemini_api_key() -> str:
    """Public helper: same as _get_api_key."""
    return _get_api_key()


def _safety_settings_none():
    """Safety settings so business documents are not blocked (google.genai types)."""
    from google.genai import types
    return [
        types.SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_NONE"),
        types.SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_NONE"),
        types.SafetySetting(category="HARM_CATEGORY_SEXUALLY_EXPLICIT", threshold="BLOCK_NONE"),
        types.SafetySetting(category="HARM_CATEGORY_DANGEROUS_CONTENT", threshold="BLOCK_NONE"),
    ]


def get_ocr_service():
    """Return Gemini OCR service if API key is set; otherwise fall back to mock."""
    key = _get_api_key()
    if not key:
        logger.warning("GEMINI_API_KEY is empty or unset; cannot use Gemini OCR.")
        from docintake.llm.mock_impl import get_mock_ocr_service
        return get_mock_ocr_service()
    logger.info("Using OCR model: %s (Gemini)", settings.ocr_model_name)
    return GeminiOcrService(model_name=settings.ocr_model_name, api_key=key)


class GeminiOcrService:
    """Google Gemini vision transcription via google.genai SDK (aio generate_content)."""

    def __init__(
        self,
        model_name: str | None = None,
        api_key: str | None = None,
        *,
        timeout_seconds: float | None = None,
        strict: bool | None = None,
        client=None,
    ) -> None:
        from google import genai
        self._client = client if client is not None else genai.Client(api_key=api_key or _get_api_key())
        self._model_name = (model_name or settings.ocr_model_name).strip()
        self._timeout = timeout_seconds if timeout_seconds is not None else settings.ocr_timeout_seconds
        self._strict = settings.ocr_strict if strict is None else strict

    async def transcribe(self, image: bytes, mime_type: str) -> str:
        """Transcribe one image. Failures → "" (or TranscriptionFailure when strict)."""
        metrics.increment_ocr_pages_total()
        try:
            return await self._transcribe(image, mime_type)
        except TranscriptionFailure as e:
            failures = metrics.increment_ocr_failures_total()
            if self._strict:
                raise
            logger.warning("Vision OCR failed, using empty transcription: %s (ocr_failures_total=%s)", e, failures)
            return ""

    async def _transcribe(self, image: bytes, mime_type: str) -> str:
        from google.genai import types
        config = types.GenerateContentConfig(
            safety_settings=_safety_settings_none(),
            temperature=0.0,
        )
        contents = [types.Part.from_bytes(data=image, mime_type=mime_type), OCR_PROMPT]
        t0 = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._model_name,
                    contents=contents,
                    config=config,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise TranscriptionFailure(f"timed out after {self._timeout}s") from e
        except Exception as e:
            raise TranscriptionFailure(f"{type(e).__name__}: {e}") from e
        text = (getattr(response, "text", None) or "").strip()
        logger.debug(
            "Gemini OCR: model=%s image_bytes=%s text_len=%s elapsed=%.2fs",
            self._model_name, len(image), len(text), time.perf_counter() - t0,
        )
        if not text:
            raise TranscriptionFailure("empty response")
        return text
