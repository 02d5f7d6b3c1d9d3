"""
Rasterize PDF pages and decode image files into PixelBuffers for OCR.
PDF pages render through PyMuPDF at a fixed scale (1.0 = 72 DPI); images decode at native
resolution through Pillow. Buffers are PNG-encoded (lossless) before transmission.
"""
import io
import logging
import time

import numpy as np
import pymupdf
from PIL import Image, ImageOps, UnidentifiedImageError

from docintake.services.errors import DecodeError, RenderError
from docintake.services.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

DEFAULT_RENDER_SCALE = 3.0
PNG_MIME = "image/png"


def render_pdf_page(doc: "pymupdf.Document", page_index: int, scale: float = DEFAULT_RENDER_SCALE) -> PixelBuffer:
    """Render one page (0-based index) at scale × the page viewport. Raises RenderError."""
    t0 = time.perf_counter()
    try:
        page = doc[page_index]
        mat = pymupdf.Matrix(scale, scale)
        pix = page.get_pixmap(matrix=mat, alpha=False)
        rows = np.frombuffer(pix.samples, dtype=np.uint8).reshape(pix.height, pix.stride)
        samples = rows[:, : pix.width * pix.n].reshape(pix.height, pix.width, pix.n)
        if pix.n not in (3, 4):
            # Gray/CMYK colorspaces: let PyMuPDF convert to RGB first
            rgb_pix = pymupdf.Pixmap(pymupdf.csRGB, pix)
            rows = np.frombuffer(rgb_pix.samples, dtype=np.uint8).reshape(rgb_pix.height, rgb_pix.stride)
            samples = rows[:, : rgb_pix.width * 3].reshape(rgb_pix.height, rgb_pix.width, 3)
        buffer = PixelBuffer.from_array(samples)
    except Exception as e:
        raise RenderError(f"page {page_index + 1}: {e}") from e
    logger.debug(
        "render_pdf_page: page=%s scale=%.1f size=%sx%s elapsed=%.2fs",
        page_index + 1, scale, buffer.width, buffer.height, time.perf_counter() - t0,
    )
    return buffer


def load_image(data: bytes) -> PixelBuffer:
    """Decode image bytes at native resolution (EXIF orientation applied). Raises DecodeError."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            img = ImageOps.exif_transpose(img)
            rgba = img.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DecodeError(f"image could not be decoded: {e}") from e
    return PixelBuffer.from_array(np.asarray(rgba))


def encode_png(buffer: PixelBuffer) -> bytes:
    """Lossless PNG bytes of the buffer (RGBA)."""
    out = io.BytesIO()
    Image.fromarray(buffer.samples).save(out, format="PNG")
    return out.getvalue()
