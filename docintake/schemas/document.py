"""
Uploaded-file request/response schemas.
"""
from pydantic import BaseModel, ConfigDict

from docintake.models import FileSnapshot


class SessionResponse(BaseModel):
    id: str


class UploadedFileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    declared_type: str
    status: str
    ocr_progress: int = 0  # 0-100 while OCR pages are being transcribed
    error: str | None = None  # "<ExceptionType>: <message>" when status is error
    character_count: int = 0
    used_ocr: bool = False  # vision OCR produced the content (scanned PDF or image)
    ocr_pages: list[int] = []


class UploadedFileDetailResponse(UploadedFileResponse):
    """Single file get; includes extracted content."""
    content: str = ""


class UploadedFileListResponse(BaseModel):
    items: list[UploadedFileResponse]
    total: int


class CancelResponse(BaseModel):
    cancelled: int


def file_to_response(f: FileSnapshot) -> UploadedFileResponse:
    return UploadedFileResponse(
        id=f.id,
        name=f.name,
        declared_type=f.declared_type,
        status=f.status.value,
        ocr_progress=f.ocr_progress,
        error=f.error,
        character_count=len(f.content),
        used_ocr=f.used_ocr,
        ocr_pages=list(f.ocr_pages),
    )


def file_to_detail(f: FileSnapshot) -> UploadedFileDetailResponse:
    return UploadedFileDetailResponse(**file_to_response(f).model_dump(), content=f.content)
