"""
Sessions API: upload a batch of files into a session, watch per-file status, fetch the combined
plaintext for the reasoning engine. Files are processed sequentially in the background.
Handlers are async: session state is only read and written on the event loop.
"""
import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import PlainTextResponse, Response

from docintake.config import settings
from docintake.api.deps import create_session, get_session
from docintake.jobs.ingestion import IngestionSession, SubmittedFile
from docintake.schemas.document import (
    CancelResponse,
    SessionResponse,
    UploadedFileDetailResponse,
    UploadedFileListResponse,
    file_to_detail,
    file_to_response,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])
logger = logging.getLogger(__name__)


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def new_session():
    """Start an empty ingestion session."""
    return SessionResponse(id=create_session().id)


@router.post("/{session_id}/files", response_model=UploadedFileListResponse, status_code=status.HTTP_202_ACCEPTED)
async def upload_files(
    files: list[UploadFile] = File(...),
    wait: bool = Query(False, description="Block until the whole batch is ready or failed"),
    session: IngestionSession = Depends(get_session),
):
    """Queue files for extraction. Returns the new records (status processing unless wait=true)."""
    batch: list[SubmittedFile] = []
    for upload in files:
        contents = await upload.read()
        if not contents:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{upload.filename}: file is empty")
        if len(contents) > settings.max_upload_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"{upload.filename}: larger than {settings.max_upload_bytes} bytes",
            )
        batch.append(SubmittedFile(
            name=upload.filename or "upload",
            data=contents,
            declared_type=upload.content_type or "",
        ))
    ids = await session.submit(batch)
    if wait:
        await session.wait_idle()
    new_ids = set(ids)
    items = [file_to_response(f) for f in session.snapshot() if f.id in new_ids]
    return UploadedFileListResponse(items=items, total=len(items))


@router.get("/{session_id}/files", response_model=UploadedFileListResponse)
async def list_files(session: IngestionSession = Depends(get_session)):
    items = [file_to_response(f) for f in session.snapshot()]
    return UploadedFileListResponse(items=items, total=len(items))


@router.get("/{session_id}/files/{file_id}", response_model=UploadedFileDetailResponse)
async def get_file(file_id: str, session: IngestionSession = Depends(get_session)):
    f = session.get(file_id)
    if f is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return file_to_detail(f)


@router.delete("/{session_id}/files/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(file_id: str, session: IngestionSession = Depends(get_session)):
    if not session.remove(file_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{session_id}/cancel", response_model=CancelResponse)
async def cancel_batch(session: IngestionSession = Depends(get_session)):
    """Abort queued and in-flight files; they finish with status error."""
    return CancelResponse(cancelled=session.cancel())


@router.get("/{session_id}/context", response_class=PlainTextResponse)
async def combined_context(session: IngestionSession = Depends(get_session)):
    """FILE: <name>\\n<content> for every ready file, joined by a blank line."""
    return PlainTextResponse(session.combined_content())
