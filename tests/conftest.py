"""
Shared fixtures: documents built on the fly (PyMuPDF, Pillow, python-docx) and a fake OCR
service so nothing here touches the network.
"""
import asyncio
import io

import numpy as np
import pytest

from docintake.services.errors import TranscriptionFailure
from docintake.services.pdf_extraction_service import ExtractionOptions


class FakeOcr:
    """Records every call; returns canned text (or per-call text from a list)."""

    def __init__(self, text="transcribed text", *, fail=False, strict=False, delay=0.0, on_call=None):
        self.text = text
        self.fail = fail
        self.strict = strict
        self.delay = delay
        self.on_call = on_call
        self.calls: list[tuple[bytes, str]] = []
        self.active = 0
        self.max_active = 0

    async def transcribe(self, image: bytes, mime_type: str) -> str:
        self.calls.append((image, mime_type))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.on_call is not None:
                self.on_call(len(self.calls))
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail:
                if self.strict:
                    raise TranscriptionFailure("service unavailable")
                return ""
            if isinstance(self.text, list):
                return self.text[len(self.calls) - 1]
            return self.text
        finally:
            self.active -= 1


@pytest.fixture
def fake_ocr():
    return FakeOcr()


@pytest.fixture
def ocr_factory():
    return FakeOcr


@pytest.fixture
def fast_options():
    """Low render scale keeps OCR-path tests quick."""
    return ExtractionOptions(render_scale=0.5)


@pytest.fixture
def make_pdf():
    """make_pdf(["page one text", "page two text"]) -> PDF bytes."""
    pymupdf = pytest.importorskip("pymupdf")

    def _make(page_texts, width=595, height=842):
        doc = pymupdf.open()
        for text in page_texts:
            page = doc.new_page(width=width, height=height)
            if text:
                page.insert_text((50, 72), text)
        data = doc.tobytes()
        doc.close()
        return data

    return _make


@pytest.fixture
def make_png():
    """make_png(array or (w, h, color)) -> PNG bytes."""
    from PIL import Image

    def _make(pixels=None, *, size=(8, 6), color=(200, 200, 200)):
        if pixels is None:
            img = Image.new("RGB", size, color)
        else:
            img = Image.fromarray(np.asarray(pixels, dtype=np.uint8))
        out = io.BytesIO()
        img.save(out, format="PNG")
        return out.getvalue()

    return _make


@pytest.fixture
def make_docx():
    """make_docx(["para 1", "para 2"], table=[["a", "b"]]) -> DOCX bytes."""
    docx = pytest.importorskip("docx")

    def _make(paragraphs, table=None):
        doc = docx.Document()
        for p in paragraphs:
            doc.add_paragraph(p)
        if table:
            t = doc.add_table(rows=len(table), cols=len(table[0]))
            for r, row in enumerate(table):
                for c, value in enumerate(row):
                    t.cell(r, c).text = value
        out = io.BytesIO()
        doc.save(out)
        return out.getvalue()

    return _make
