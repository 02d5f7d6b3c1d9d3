"""Unit tests for the per-file status state machine."""
import pytest

from docintake.models import FileStatus, UploadedFile
from docintake.services.errors import DecodeError, InvalidTransition


def test_happy_path_history():
    f = UploadedFile(name="a.txt", declared_type="text/plain")
    assert f.status is FileStatus.QUEUED
    f.mark_processing()
    f.mark_ready("hello")
    assert f.status_history == [FileStatus.QUEUED, FileStatus.PROCESSING, FileStatus.READY]
    assert f.content == "hello"


def test_error_keeps_content_empty_and_records_cause():
    f = UploadedFile(name="a.pdf", declared_type="application/pdf")
    f.mark_processing()
    f.ocr_progress = 40
    f.mark_error(DecodeError("PDF could not be read"))
    assert f.status is FileStatus.ERROR
    assert f.content == ""
    assert f.error == "DecodeError: PDF could not be read"
    assert f.ocr_progress == 0


def test_cannot_skip_processing():
    f = UploadedFile(name="a.txt", declared_type="")
    with pytest.raises(InvalidTransition):
        f.mark_ready("x")
    assert f.content == ""


@pytest.mark.parametrize("finish", ["ready", "error"])
def test_terminal_states_are_final(finish):
    f = UploadedFile(name="a.txt", declared_type="")
    f.mark_processing()
    if finish == "ready":
        f.mark_ready("x")
    else:
        f.mark_error("boom")
    with pytest.raises(InvalidTransition):
        f.mark_processing()
    with pytest.raises(InvalidTransition):
        f.mark_ready("y")
    with pytest.raises(InvalidTransition):
        f.mark_error("again")


def test_ids_are_unique_even_for_same_name():
    a = UploadedFile(name="same.txt", declared_type="")
    b = UploadedFile(name="same.txt", declared_type="")
    assert a.id != b.id


def test_snapshot_is_a_frozen_copy():
    f = UploadedFile(name="a.txt", declared_type="")
    snap = f.snapshot()
    f.mark_processing()
    assert snap.status is FileStatus.QUEUED
    with pytest.raises(Exception):
        snap.status = FileStatus.READY
