"""
In-memory ingestion models. Nothing here is persisted; records live for the session.
"""
from docintake.models.types import FileStatus
from docintake.models.uploaded_file import FileSnapshot, UploadedFile

__all__ = ["FileStatus", "FileSnapshot", "UploadedFile"]
