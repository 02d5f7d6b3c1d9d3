"""
UploadedFile: one record per submitted file, owned by the ingestion session.
Consumers only ever see FileSnapshot copies.
"""
import uuid
from dataclasses import dataclass, field

from docintake.models.types import ALLOWED_TRANSITIONS, FileStatus
from docintake.services.errors import InvalidTransition


@dataclass(frozen=True)
class FileSnapshot:
    """Read-only view of an UploadedFile at publish time."""

    id: str
    name: str
    declared_type: str
    status: FileStatus
    content: str
    ocr_progress: int
    error: str | None
    ocr_pages: tuple[int, ...] = ()

    @property
    def used_ocr(self) -> bool:
        return bool(self.ocr_pages)


@dataclass
class UploadedFile:
    name: str  # user-visible, not unique
    declared_type: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: FileStatus = FileStatus.QUEUED
    content: str = ""
    ocr_progress: int = 0
    error: str | None = None
    ocr_pages: tuple[int, ...] = ()  # 1-based pages (or the image) transcribed by vision OCR
    status_history: list[FileStatus] = field(default_factory=lambda: [FileStatus.QUEUED])

    def _transition(self, new_status: FileStatus) -> None:
        if new_status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransition(f"{self.name} ({self.id}): {self.status.value} → {new_status.value}")
        self.status = new_status
        self.status_history.append(new_status)

    def mark_processing(self) -> None:
        self._transition(FileStatus.PROCESSING)

    def mark_ready(self, content: str, ocr_pages: tuple[int, ...] = ()) -> None:
        """Terminal success. content is written here and nowhere else."""
        self._transition(FileStatus.READY)
        self.content = content
        self.ocr_pages = tuple(ocr_pages)
        self.ocr_progress = 0

    def mark_error(self, cause: BaseException | str) -> None:
        """Terminal failure; content stays empty, cause kept for diagnosis."""
        self._transition(FileStatus.ERROR)
        if isinstance(cause, BaseException):
            self.error = f"{type(cause).__name__}: {cause}"
        else:
            self.error = cause
        self.ocr_progress = 0

    def snapshot(self) -> FileSnapshot:
        return FileSnapshot(
            id=self.id,
            name=self.name,
            declared_type=self.declared_type,
            status=self.status,
            content=self.content,
            ocr_progress=self.ocr_progress,
            error=self.error,
            ocr_pages=self.ocr_pages,
        )
