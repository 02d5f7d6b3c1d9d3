"""
Ingestion coordinator: one IngestionSession per user session, owning the file list.

submit(files) appends queued records, marks the whole batch processing, publishes once, then a
single worker drains the queue strictly in submission order: each file reaches ready or error
before the next one starts. A failing file never stops the rest of the queue; nothing is retried.
Subscribers receive a read-only snapshot of the list after every file completes (and on progress).
"""
import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Iterable

from docintake.config import settings
from docintake.llm import get_ocr_service
from docintake.llm.base import OcrService
from docintake.models import FileSnapshot, UploadedFile
from docintake.services.cancellation import CancelToken
from docintake.services.errors import IngestionCancelled, IngestionError
from docintake.services.format_dispatch import extract
from docintake.services.pdf_extraction_service import ExtractionOptions
from docintake.services.prompt_helpers import build_combined_content

logger = logging.getLogger(__name__)

OnChange = Callable[[list[FileSnapshot]], None]


@dataclass
class SubmittedFile:
    """Raw upload: bytes plus the user-visible name and declared MIME type."""

    name: str
    data: bytes
    declared_type: str = ""


@dataclass
class _Job:
    record: UploadedFile
    data: bytes
    token: CancelToken = field(default_factory=CancelToken)


class IngestionSession:
    """Owns the file list for one session; readers only ever get snapshots."""

    def __init__(
        self,
        ocr: OcrService | None = None,
        options: ExtractionOptions | None = None,
        session_id: str | None = None,
    ) -> None:
        self.id = session_id or uuid.uuid4().hex
        self._ocr = ocr
        self._options = options or ExtractionOptions.from_settings(settings)
        self._files: list[UploadedFile] = []
        self._subscribers: list[OnChange] = []
        self._pending: dict[str, _Job] = {}
        self._queue: asyncio.Queue[_Job] | None = None
        self._worker: asyncio.Task | None = None

    # Read side

    def snapshot(self) -> list[FileSnapshot]:
        return [f.snapshot() for f in self._files]

    def get(self, file_id: str) -> FileSnapshot | None:
        record = self._find(file_id)
        return record.snapshot() if record else None

    def combined_content(self) -> str:
        return build_combined_content(self.snapshot())

    def subscribe(self, on_change: OnChange) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._subscribers.append(on_change)

        def _unsubscribe() -> None:
            if on_change in self._subscribers:
                self._subscribers.remove(on_change)

        return _unsubscribe

    # Write side

    async def submit(self, files: Iterable[SubmittedFile]) -> list[str]:
        """Queue a batch; returns the new file ids in submission order."""
        files = list(files)
        if not files:
            return []
        if self._queue is None:
            self._queue = asyncio.Queue()
        records = [UploadedFile(name=f.name, declared_type=f.declared_type) for f in files]
        self._files.extend(records)
        for record in records:
            record.mark_processing()
        self._publish()
        for record, f in zip(records, files):
            job = _Job(record=record, data=f.data)
            self._pending[record.id] = job
            self._queue.put_nowait(job)
        logger.info("session %s: queued %s file(s): %s", self.id, len(records), [r.name for r in records])
        self._ensure_worker()
        return [r.id for r in records]

    def remove(self, file_id: str) -> bool:
        """Drop a file from the list. Queued files are skipped; an in-flight file stops at its next page."""
        record = self._find(file_id)
        if record is None:
            return False
        self._files.remove(record)
        job = self._pending.get(file_id)
        if job is not None:
            job.token.cancel()
        self._publish()
        return True

    def cancel(self) -> int:
        """Abort every queued or in-flight file. Returns how many were signalled."""
        for job in self._pending.values():
            job.token.cancel()
        if self._pending:
            logger.info("session %s: cancelling %s pending file(s)", self.id, len(self._pending))
        return len(self._pending)

    async def wait_idle(self) -> None:
        """Wait until everything submitted so far has finished."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self) -> None:
        """Stop the worker. Files that never finished end in error (IngestionCancelled)."""
        unfinished = list(self._pending.values())
        self.cancel()
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None
        if self._queue is not None:
            while not self._queue.empty():
                self._queue.get_nowait()
                self._queue.task_done()
        self._pending.clear()
        closed = IngestionCancelled("session closed")
        for job in unfinished:
            if not job.record.status.is_terminal:
                job.record.mark_error(closed)
        if any(self._is_tracked(job.record) for job in unfinished):
            self._publish()

    # Worker

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._run_worker())

    async def _run_worker(self) -> None:
        assert self._queue is not None
        while True:
            job = await self._queue.get()
            try:
                await self._process(job)
            finally:
                self._pending.pop(job.record.id, None)
                self._queue.task_done()

    async def _process(self, job: _Job) -> None:
        record = job.record
        if not self._is_tracked(record):
            logger.info("session %s: skipping removed file %s", self.id, record.name)
            return
        if self._ocr is None:
            self._ocr = get_ocr_service()
        t0 = time.perf_counter()
        try:
            job.token.raise_if_cancelled()
            result = await extract(
                job.data,
                record.declared_type,
                record.name,
                ocr=self._ocr,
                options=self._options,
                on_progress=lambda percent: self._set_progress(record, percent),
                cancel_token=job.token,
            )
        except IngestionError as e:
            logger.warning("session %s: %s failed: %s", self.id, record.name, e)
            record.mark_error(e)
        except Exception as e:
            logger.exception("session %s: unexpected error extracting %s: %s", self.id, record.name, e)
            record.mark_error(e)
        else:
            record.mark_ready(result.text, result.ocr_pages)
        elapsed = time.perf_counter() - t0
        if not self._is_tracked(record):
            logger.info("session %s: %s removed while processing; result discarded", self.id, record.name)
            return
        logger.info(
            "session %s: %s → %s (%s chars) elapsed=%.2fs",
            self.id, record.name, record.status.value, len(record.content), elapsed,
        )
        self._publish()

    # Internals

    def _find(self, file_id: str) -> UploadedFile | None:
        return next((f for f in self._files if f.id == file_id), None)

    def _is_tracked(self, record: UploadedFile) -> bool:
        return any(f is record for f in self._files)

    def _set_progress(self, record: UploadedFile, percent: int) -> None:
        record.ocr_progress = percent
        if self._is_tracked(record):
            self._publish()

    def _publish(self) -> None:
        snapshot = self.snapshot()
        for on_change in list(self._subscribers):
            try:
                on_change(snapshot)
            except Exception:
                logger.exception("session %s: subscriber failed", self.id)
