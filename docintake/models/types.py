"""
File status values and the transitions allowed between them.
"""
import enum


class FileStatus(str, enum.Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (FileStatus.READY, FileStatus.ERROR)


# queued → processing → {ready, error}; ready and error are terminal.
ALLOWED_TRANSITIONS: dict[FileStatus, frozenset[FileStatus]] = {
    FileStatus.QUEUED: frozenset({FileStatus.PROCESSING}),
    FileStatus.PROCESSING: frozenset({FileStatus.READY, FileStatus.ERROR}),
    FileStatus.READY: frozenset(),
    FileStatus.ERROR: frozenset(),
}
