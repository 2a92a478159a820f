"""Tests for upload validation, text extraction and upload directory cleanup."""

import os
import time
from datetime import timedelta

import pytest

from app.core.config import DOCX_MIME_TYPE
from app.core.errors import (
    ExtractionFailed,
    ExtractionUnsupported,
    FileTooLarge,
    NoFileUploaded,
    UnsupportedFileType,
)
from app.services import extract_text, remove_stored_file


def age(path, hours):
    """Push a path's mtime into the past."""
    stamp = time.time() - hours * 3600
    os.utime(path, (stamp, stamp))


# ----- Extraction -----

def test_extract_utf8_text(tmp_path):
    path = tmp_path / "essay.txt"
    path.write_bytes("Café au lait.".encode("utf-8"))
    assert extract_text(str(path), "text/plain") == "Café au lait."


def test_extract_falls_back_to_latin1(tmp_path):
    path = tmp_path / "essay.txt"
    path.write_bytes(b"caf\xe9")
    assert extract_text(str(path), "text/plain") == "café"


@pytest.mark.parametrize("mime_type, label", [("application/pdf", "PDF"), (DOCX_MIME_TYPE, "DOCX")])
def test_pdf_and_docx_ask_for_plain_text(tmp_path, mime_type, label):
    path = tmp_path / "doc"
    path.write_bytes(b"%PDF-1.4")
    with pytest.raises(ExtractionUnsupported) as exc_info:
        extract_text(str(path), mime_type)
    assert label in exc_info.value.message
    assert ".txt" in exc_info.value.message


def test_other_types_are_unsupported(tmp_path):
    with pytest.raises(UnsupportedFileType):
        extract_text(str(tmp_path / "x.png"), "image/png")


def test_unreadable_file_fails_extraction(tmp_path):
    with pytest.raises(ExtractionFailed):
        extract_text(str(tmp_path / "missing.txt"), "text/plain")


def test_remove_missing_file_is_not_an_error(tmp_path):
    remove_stored_file(str(tmp_path / "never-existed.txt"))


# ----- Validation -----

@pytest.mark.asyncio
async def test_validate_upload_rejects_bad_input(file_service):
    with pytest.raises(NoFileUploaded):
        file_service.validate_upload(None, "text/plain", 10)
    with pytest.raises(UnsupportedFileType):
        file_service.validate_upload("photo.png", "image/png", 10)
    with pytest.raises(FileTooLarge):
        file_service.validate_upload("big.txt", "text/plain", 15 * 1024 * 1024)


@pytest.mark.asyncio
async def test_validate_upload_accepts_cap_exactly(file_service):
    file_service.validate_upload("ok.txt", "text/plain", file_service.settings.max_file_size_bytes)


# ----- Upload processing -----

@pytest.mark.asyncio
async def test_process_text_upload(file_service, store, upload_dir):
    uploaded = await file_service.process_upload(b"An essay.", "essay.txt", "text/plain")

    assert uploaded.extracted_text == "An essay."
    assert uploaded.file_size == 9
    assert os.path.dirname(uploaded.file_path) == str(upload_dir / uploaded.session_id)
    assert os.path.exists(uploaded.file_path)

    files = await store.get_files_for_session(uploaded.session_id)
    assert [f.file_name for f in files] == ["essay.txt"]


@pytest.mark.asyncio
async def test_client_path_parts_are_stripped(file_service, upload_dir):
    uploaded = await file_service.process_upload(b"x", "../../etc/notes.txt", "text/plain")
    assert os.path.dirname(uploaded.file_path) == str(upload_dir / uploaded.session_id)
    assert uploaded.file_path.endswith("_notes.txt")


@pytest.mark.asyncio
async def test_failed_extraction_leaves_nothing_behind(file_service, upload_dir):
    with pytest.raises(ExtractionUnsupported):
        await file_service.process_upload(b"%PDF-1.4", "paper.pdf", "application/pdf")

    assert list(upload_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_oversized_upload_is_not_written(file_service, upload_dir):
    content = b"a" * (file_service.settings.max_file_size_bytes + 1)
    with pytest.raises(FileTooLarge):
        await file_service.process_upload(content, "big.txt", "text/plain")

    assert list(upload_dir.iterdir()) == []


# ----- Upload directory cleanup -----

@pytest.mark.asyncio
async def test_cleanup_upload_dir_removes_old_files_only(file_service, upload_dir):
    old_dir = upload_dir / "old-session"
    old_dir.mkdir()
    old_file = old_dir / "a_essay.txt"
    old_file.write_text("old")
    age(old_file, 3)
    age(old_dir, 3)

    new_dir = upload_dir / "new-session"
    new_dir.mkdir()
    new_file = new_dir / "b_essay.txt"
    new_file.write_text("new")

    stats = file_service.cleanup_upload_dir(timedelta(hours=2))

    assert stats["deleted_files"] == 1
    assert stats["deleted_dirs"] == 1
    assert stats["freed_bytes"] == 3
    assert not old_dir.exists()
    assert new_file.exists()


@pytest.mark.asyncio
async def test_cleanup_upload_dir_keeps_fresh_directory_of_old_file(file_service, upload_dir):
    session_dir = upload_dir / "busy-session"
    session_dir.mkdir()
    old_file = session_dir / "a_essay.txt"
    old_file.write_text("old")
    age(old_file, 3)

    stats = file_service.cleanup_upload_dir(timedelta(hours=2))

    assert stats["deleted_files"] == 1
    assert stats["deleted_dirs"] == 0
    assert session_dir.exists()
