"""
Application configuration from environment variables.
Loads .env from the project directory so the Gemini key is found regardless of cwd.
"""
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Default model for OCR transcription (generateContent v1beta).
_DEFAULT_OCR_MODEL = "gemini-2.5-flash"

# Models that return 404 or are retired. Normalized at config load to _DEFAULT_OCR_MODEL.
_UNSUPPORTED_GEMINI_MODELS = frozenset({
    "gemini-1.5-flash-002", "gemini-1.5-flash-001", "gemini-1.5-flash",
    "gemini-1.5-pro", "gemini-1.5-pro-001", "gemini-1.5-pro-002",
    "gemini-2.0-flash", "gemini-2.0-flash-001", "gemini-2.0-flash-lite", "gemini-2.0-flash-lite-001",
})

DEFAULT_SHARPEN_KERNEL = (0.0, -1.0, 0.0, -1.0, 5.0, -1.0, 0.0, -1.0, 0.0)


def _normalize_ocr_model(v: str) -> str:
    """Ensure ocr_model_name is supported by generateContent (avoids 404 from old .env)."""
    s = (v or _DEFAULT_OCR_MODEL).strip()
    if not s:
        return _DEFAULT_OCR_MODEL
    if s in _UNSUPPORTED_GEMINI_MODELS or s.startswith("gemini-1.5-") or s.startswith("gemini-2.0-flash"):
        return _DEFAULT_OCR_MODEL
    return s


_PROJECT_DIR = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_DIR / ".env"

if _ENV_FILE.exists():
    from dotenv import load_dotenv
    load_dotenv(_ENV_FILE, override=False)  # so GEMINI_API_KEY is in os.environ for the SDK too


class Settings(BaseSettings):
    """Load and validate config from env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OCR: Gemini vision transcription. Empty key → mock OCR (placeholder text).
    gemini_api_key: str = ""
    ocr_model_name: str = _DEFAULT_OCR_MODEL
    # Per-call timeout; a stalled request would otherwise block the rest of the queue.
    ocr_timeout_seconds: float = 120.0
    # False: failed/empty transcription becomes "" for that page. True: file goes to error.
    ocr_strict: bool = False

    # OCR fallback engages when trimmed text-layer length < density_chars_per_page * page_count.
    density_chars_per_page: int = 50
    # PDF page render scale for OCR (1.0 = 72 DPI).
    render_scale: float = 3.0

    # Enhancement: after histogram stretch, > clip_high → 255 and < clip_low → 0.
    clip_low: int = 50
    clip_high: int = 200
    # Row-major square kernel (env SHARPEN_KERNEL as JSON list).
    sharpen_kernel: tuple[float, ...] = DEFAULT_SHARPEN_KERNEL

    # "Other" formats: reject binary payloads instead of decoding them as garbage text.
    reject_binary_other: bool = False
    max_upload_bytes: int = 25 * 1024 * 1024

    # CORS: comma-separated origins
    cors_origins: str = "http://localhost:3000"

    log_level: str = "INFO"

    @field_validator("ocr_model_name", mode="before")
    @classmethod
    def _resolve_ocr_model(cls, v: str) -> str:
        return _normalize_ocr_model(v) if isinstance(v, str) else _DEFAULT_OCR_MODEL

    @field_validator("render_scale")
    @classmethod
    def _check_render_scale(cls, v: float) -> float:
        if not 0.5 <= v <= 6.0:
            raise ValueError("render_scale must be between 0.5 and 6.0")
        return v

    @field_validator("sharpen_kernel")
    @classmethod
    def _check_kernel(cls, v: tuple[float, ...]) -> tuple[float, ...]:
        side = round(len(v) ** 0.5)
        if side * side != len(v) or side % 2 == 0:
            raise ValueError("sharpen_kernel must have an odd square number of weights (e.g. 9)")
        return v

    @model_validator(mode="after")
    def _check_clip_order(self) -> "Settings":
        if not 0 <= self.clip_low < self.clip_high <= 255:
            raise ValueError("clip thresholds must satisfy 0 <= clip_low < clip_high <= 255")
        return self


settings = Settings()
