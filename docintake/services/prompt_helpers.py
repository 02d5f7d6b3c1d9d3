"""
Prompt helpers: the plaintext blob handed to the downstream reasoning engine.
Each ready file becomes "FILE: <name>\n<content>"; files are separated by a blank line.
"""
from typing import Iterable

from docintake.models import FileSnapshot, FileStatus


def format_file_block(name: str, content: str) -> str:
    return f"FILE: {name}\n{content}"


def build_combined_content(files: Iterable[FileSnapshot]) -> str:
    """Ready files only, in list order."""
    return "\n\n".join(
        format_file_block(f.name, f.content) for f in files if f.status is FileStatus.READY
    )
