"""
Hybrid PDF extraction: trust the embedded text layer unless it is too thin.
1. Text layer via PyMuPDF (pages 1..N, items space-joined, newline per page).
2. Density check: trimmed length < density_chars_per_page * N → OCR every page.
3. OCR path per page: render at render_scale → enhance (stretch, clip, sharpen) → PNG →
   vision transcription, concatenated under "--- PAGE i ---" headers.
Pages are processed one at a time; progress = round(i / N * 100) at the start of page i.
"""
import asyncio
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, NamedTuple

import pymupdf

from docintake.llm.base import OcrService
from docintake.services.cancellation import CancelToken
from docintake.services.density import DEFAULT_CHARS_PER_PAGE, needs_ocr, text_density
from docintake.services.image_enhance import EnhancementConfig, enhance_for_ocr
from docintake.services.pdf_extract import extract_text_layer, open_pdf
from docintake.services.pdf_to_images import DEFAULT_RENDER_SCALE, PNG_MIME, encode_png, render_pdf_page

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

PAGE_HEADER = "--- PAGE {page} ---"


class ExtractionResult(NamedTuple):
    """Plaintext of one file. page_count is None for non-PDF inputs."""

    text: str
    page_count: int | None = None
    ocr_pages: tuple[int, ...] = ()  # 1-based pages transcribed by OCR


@dataclass(frozen=True)
class ExtractionOptions:
    density_chars_per_page: int = DEFAULT_CHARS_PER_PAGE
    render_scale: float = DEFAULT_RENDER_SCALE
    enhancement: EnhancementConfig = field(default_factory=EnhancementConfig)
    reject_binary_other: bool = False

    @classmethod
    def from_settings(cls, s) -> "ExtractionOptions":
        return cls(
            density_chars_per_page=s.density_chars_per_page,
            render_scale=s.render_scale,
            enhancement=EnhancementConfig.from_settings(s),
            reject_binary_other=s.reject_binary_other,
        )


def progress_percent(page: int, total: int) -> int:
    """round(page / total * 100), halves rounded up."""
    if total <= 0:
        return 0
    return int(math.floor(page / total * 100 + 0.5))


def render_enhanced_png(doc: "pymupdf.Document", page_index: int, options: ExtractionOptions) -> bytes:
    """Render → enhance → PNG for one page (0-based index). Blocking; run off the event loop."""
    raw = render_pdf_page(doc, page_index, options.render_scale)
    return encode_png(enhance_for_ocr(raw, options.enhancement))


async def transcribe_pages(
    doc: "pymupdf.Document",
    ocr: OcrService,
    options: ExtractionOptions,
    on_progress: ProgressCallback | None = None,
    cancel_token: CancelToken | None = None,
) -> str:
    """Transcribe every page in order; one render and one OCR call in flight at a time."""
    total = len(doc)
    parts: list[str] = []
    for page in range(1, total + 1):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        if on_progress is not None:
            on_progress(progress_percent(page, total))
        t0 = time.perf_counter()
        png = await asyncio.to_thread(render_enhanced_png, doc, page - 1, options)
        text = await ocr.transcribe(png, PNG_MIME)
        logger.debug(
            "ocr page %s/%s: png_bytes=%s text_len=%s elapsed=%.2fs",
            page, total, len(png), len(text), time.perf_counter() - t0,
        )
        parts.append(f"{PAGE_HEADER.format(page=page)}\n{text}\n\n")
    return "".join(parts)


async def extract_pdf(
    data: bytes,
    ocr: OcrService,
    options: ExtractionOptions | None = None,
    *,
    name: str = "",
    on_progress: ProgressCallback | None = None,
    cancel_token: CancelToken | None = None,
) -> ExtractionResult:
    """Text layer, or OCR of all pages when the text layer is below the density threshold."""
    options = options or ExtractionOptions()
    doc = await asyncio.to_thread(open_pdf, data)
    try:
        full_text, page_count = await asyncio.to_thread(extract_text_layer, doc)
        if not needs_ocr(full_text, page_count, options.density_chars_per_page):
            logger.info("extract_pdf: %s pages=%s text layer accepted (%s chars)", name, page_count, len(full_text))
            return ExtractionResult(text=full_text, page_count=page_count, ocr_pages=())
        logger.info(
            "Engaging vision OCR for %s: density=%.1f chars/page < %s (pages=%s)",
            name, text_density(full_text, page_count), options.density_chars_per_page, page_count,
        )
        text = await transcribe_pages(doc, ocr, options, on_progress=on_progress, cancel_token=cancel_token)
        return ExtractionResult(text=text, page_count=page_count, ocr_pages=tuple(range(1, page_count + 1)))
    finally:
        doc.close()
