"""
Format dispatch: route one file's bytes to the right extractor chain by declared MIME type
or file extension. pdf → text layer / OCR fallback, image → enhance + OCR,
docx → python-docx raw text, anything else → UTF-8 decode.
"""
import asyncio
import enum
import logging
import mimetypes

from docintake.llm.base import OcrService
from docintake.services.cancellation import CancelToken
from docintake.services.docx_extract import extract_text_from_docx
from docintake.services.errors import UnsupportedFormat
from docintake.services.image_enhance import EnhancementConfig, enhance_for_ocr
from docintake.services.pdf_extraction_service import (
    ExtractionOptions,
    ExtractionResult,
    ProgressCallback,
    extract_pdf,
)
from docintake.services.pdf_to_images import PNG_MIME, encode_png, load_image

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
_GENERIC_MIMES = frozenset({"", "application/octet-stream", "binary/octet-stream"})
# Binary sniff window for reject_binary_other
_BINARY_SNIFF_BYTES = 8192
# Single OCR call: shown as half done while it runs
IMAGE_OCR_PROGRESS = 50


class FileKind(str, enum.Enum):
    PDF = "pdf"
    IMAGE = "image"
    DOCX = "docx"
    OTHER = "other"


def classify(declared_type: str, name: str = "") -> FileKind:
    """PDF, image, DOCX or other. Generic/missing MIME types are guessed from the extension."""
    mime = (declared_type or "").split(";")[0].strip().lower()
    lower_name = (name or "").lower()
    if mime in _GENERIC_MIMES and lower_name:
        mime = (mimetypes.guess_type(lower_name)[0] or mime).lower()
    if mime == PDF_MIME or lower_name.endswith(".pdf"):
        return FileKind.PDF
    if mime.startswith("image/"):
        return FileKind.IMAGE
    if mime == DOCX_MIME or lower_name.endswith(".docx"):
        return FileKind.DOCX
    return FileKind.OTHER


def decode_plaintext(data: bytes, reject_binary: bool = False) -> str:
    """UTF-8 decode; invalid sequences become U+FFFD. Optionally reject binary payloads."""
    if reject_binary and b"\x00" in data[:_BINARY_SNIFF_BYTES]:
        raise UnsupportedFormat("binary content with no known extractor")
    return data.decode("utf-8", errors="replace")


def _enhanced_image_png(data: bytes, config: EnhancementConfig) -> bytes:
    return encode_png(enhance_for_ocr(load_image(data), config))


async def extract_image(
    data: bytes,
    ocr: OcrService,
    options: ExtractionOptions,
    on_progress: ProgressCallback | None = None,
) -> ExtractionResult:
    """Decode at native resolution → enhance → PNG → one OCR call."""
    if on_progress is not None:
        on_progress(IMAGE_OCR_PROGRESS)
    png = await asyncio.to_thread(_enhanced_image_png, data, options.enhancement)
    text = await ocr.transcribe(png, PNG_MIME)
    return ExtractionResult(text=text, ocr_pages=(1,))


async def extract(
    data: bytes,
    declared_type: str,
    name: str = "",
    *,
    ocr: OcrService,
    options: ExtractionOptions | None = None,
    on_progress: ProgressCallback | None = None,
    cancel_token: CancelToken | None = None,
) -> ExtractionResult:
    """
    Route to the extractor for this file. Raises DecodeError/RenderError (and, in strict OCR
    mode, TranscriptionFailure); UnsupportedFormat only when reject_binary_other is on.
    """
    options = options or ExtractionOptions()
    kind = classify(declared_type, name)
    logger.debug("extract: name=%s declared_type=%s kind=%s bytes=%s", name, declared_type, kind.value, len(data))
    if kind is FileKind.PDF:
        return await extract_pdf(
            data, ocr, options, name=name, on_progress=on_progress, cancel_token=cancel_token
        )
    if kind is FileKind.IMAGE:
        return await extract_image(data, ocr, options, on_progress=on_progress)
    if kind is FileKind.DOCX:
        return ExtractionResult(text=await asyncio.to_thread(extract_text_from_docx, data))
    return ExtractionResult(text=decode_plaintext(data, options.reject_binary_other))
