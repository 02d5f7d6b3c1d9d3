"""
FastAPI application entrypoint.
Run with: uvicorn docintake.main:app --reload --port 8000

  - Sessions: POST /sessions
  - Files: POST /sessions/{id}/files, GET /sessions/{id}/files[/{file_id}], DELETE /sessions/{id}/files/{file_id}
  - Batch: POST /sessions/{id}/cancel
  - Output: GET /sessions/{id}/context (plaintext for the reasoning engine)
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docintake import __version__, metrics
from docintake.config import settings
from docintake.api.deps import close_all_sessions
from docintake.api.documents import router as documents_router
from docintake.llm.gemini_impl import get_gemini_api_key


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and report the OCR backend; close sessions on shutdown."""
    logging.basicConfig(
        level=getattr(logging, (settings.log_level or "INFO").upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )
    _log = logging.getLogger("docintake.main")
    key = get_gemini_api_key()
    if key:
        _log.info("Gemini: API key loaded (len=%s). OCR model %s.", len(key), settings.ocr_model_name)
    else:
        _log.warning("GEMINI_API_KEY not set. Image/scanned documents will get mock OCR text.")
    yield
    await close_all_sessions()


app = FastAPI(
    title="Document Intake API",
    description="Uploaded documents (text, PDF, DOCX, images) → clean plaintext for a reasoning engine.",
    version=__version__,
    lifespan=lifespan,
)

_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins if _origins else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(documents_router)


@app.get("/health")
def health():
    return {"status": "ok", "version": __version__, "metrics": metrics.snapshot()}
