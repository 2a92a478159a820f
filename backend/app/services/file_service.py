"""
File Service
============
Handles uploaded documents: validation, storage on disk, text extraction
and cleanup of stored bytes.

This service:
1. Rejects missing, oversized or disallowed files before touching disk
2. Saves the bytes under upload_dir/<session_id>/
3. Extracts plain text (text/plain only for now)
4. Records the upload through the Session Store
"""

import os
import uuid
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Optional, TYPE_CHECKING
import structlog

from app.core.config import DOCX_MIME_TYPE, Settings, get_settings
from app.core.errors import (
    CleanupFailure,
    ExtractionFailed,
    ExtractionUnsupported,
    FileTooLarge,
    NoFileUploaded,
    UnsupportedFileType,
)

if TYPE_CHECKING:
    from app.models import UploadedFile
    from app.services.session_store import SessionStore

logger = structlog.get_logger(__name__)


UNSUPPORTED_EXTRACTION_MESSAGES = {
    "application/pdf": (
        "PDF text extraction is not available yet. "
        "Please convert the document to a plain-text (.txt) file and upload it again."
    ),
    DOCX_MIME_TYPE: (
        "DOCX text extraction is not available yet. "
        "Please convert the document to a plain-text (.txt) file and upload it again."
    ),
}


def extract_text(file_path: str, mime_type: str) -> str:
    """
    Extract plain text from a stored file.
    
    Args:
        file_path: Path of the stored upload
        mime_type: MIME type reported for the upload
    
    Returns:
        The file's text
    
    Raises:
        ExtractionUnsupported: PDF or DOCX
        UnsupportedFileType: any other non-text type
        ExtractionFailed: the file could not be read or decoded
    """
    if mime_type in UNSUPPORTED_EXTRACTION_MESSAGES:
        raise ExtractionUnsupported(UNSUPPORTED_EXTRACTION_MESSAGES[mime_type])
    
    if mime_type != "text/plain":
        raise UnsupportedFileType(f"Unsupported file type: {mime_type}")
    
    try:
        raw = Path(file_path).read_bytes()
    except OSError as e:
        raise ExtractionFailed(f"Failed to extract text from file: {e}") from e
    
    # latin-1 maps every byte, so it always succeeds as a last resort
    for encoding in ("utf-8", "latin-1"):
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ExtractionFailed(f"Could not decode text file: {file_path}")


def remove_stored_file(file_path: str) -> None:
    """
    Delete a stored upload from disk. A missing file is not an error.
    
    Raises:
        CleanupFailure: if the file exists but cannot be removed
    """
    try:
        if os.path.exists(file_path):
            os.remove(file_path)
            logger.debug("Removed stored file", file_path=file_path)
    except OSError as e:
        raise CleanupFailure(f"Could not delete {file_path}: {e}") from e


class FileService:
    """
    Service for handling uploads.
    
    Responsibilities:
    - Validate type and size
    - Save and extract files
    - Sweep old files from the upload directory
    """
    
    def __init__(
        self,
        store: Optional["SessionStore"] = None,
        upload_dir: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.upload_dir = Path(upload_dir or self.settings.upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
    
    def validate_upload(self, filename: Optional[str], content_type: Optional[str], size: int) -> None:
        """
        Check an upload before anything is written.
        
        Raises:
            NoFileUploaded, UnsupportedFileType, FileTooLarge
        """
        if not filename:
            raise NoFileUploaded("No file uploaded")
        
        if content_type not in self.settings.allowed_mime_types:
            raise UnsupportedFileType(
                "Invalid file type. Only PDF, DOCX, and TXT files are allowed."
            )
        
        if size > self.settings.max_file_size_bytes:
            raise FileTooLarge(
                f"File too large. Maximum size: {self.settings.max_file_size_mb}MB"
            )
    
    def save_file(self, file_content: bytes, filename: str, session_id: str) -> str:
        """
        Save uploaded file to disk.
        
        Args:
            file_content: Raw file bytes
            filename: Original filename
            session_id: Session identifier
        
        Returns:
            Path where file was saved
        """
        # Create session directory
        session_dir = self.upload_dir / session_id
        session_dir.mkdir(parents=True, exist_ok=True)
        
        # Never trust directory parts of the client's filename
        safe_name = Path(filename).name or "upload"
        file_path = session_dir / f"{uuid.uuid4().hex[:8]}_{safe_name}"
        file_path.write_bytes(file_content)
        
        return str(file_path)
    
    async def process_upload(
        self,
        file_content: bytes,
        filename: Optional[str],
        content_type: Optional[str],
    ) -> "UploadedFile":
        """
        Process an uploaded file.
        
        This method:
        1. Validates type and size (no disk or database writes on failure)
        2. Issues a new session id
        3. Saves the file to disk
        4. Extracts its text, deleting the saved file if that fails
        5. Records the upload
        
        Returns:
            UploadedFile model instance
        """
        self.validate_upload(filename, content_type, len(file_content))
        
        from app.services.session_store import SessionStore
        
        session_id = SessionStore.new_session_id()
        file_path = self.save_file(file_content, filename, session_id)
        
        try:
            extracted_text = extract_text(file_path, content_type)
            return await self.store.create_uploaded_file(
                session_id=session_id,
                file_name=filename,
                file_path=file_path,
                file_type=content_type,
                file_size=len(file_content),
                extracted_text=extracted_text,
            )
        except Exception:
            self._discard(file_path)
            raise
    
    def _discard(self, file_path: str) -> None:
        try:
            remove_stored_file(file_path)
            Path(file_path).parent.rmdir()
        except CleanupFailure as e:
            logger.warning("Upload cleanup failed", file_path=file_path, error=str(e))
        except OSError:
            pass  # Directory not empty
    
    def cleanup_upload_dir(
        self,
        max_age: timedelta,
        now: Optional[datetime] = None,
    ) -> Dict[str, int]:
        """
        Delete stored uploads older than max_age by modification time.
        
        Catches files whose database rows are already gone.
        
        Returns:
            Statistics about cleaned up files
        """
        cutoff = (now or datetime.now()) - max_age
        
        deleted_files = 0
        deleted_dirs = 0
        failed = 0
        freed_bytes = 0
        
        if not self.upload_dir.exists():
            return {"deleted_files": 0, "deleted_dirs": 0, "failed": 0, "freed_bytes": 0}
        
        for entry in self.upload_dir.iterdir():
            # Checked before deleting anything, which bumps the directory's mtime
            dir_is_old = entry.is_dir() and datetime.fromtimestamp(entry.stat().st_mtime) < cutoff
            candidates = list(entry.iterdir()) if entry.is_dir() else [entry]
            
            for file_path in candidates:
                if not file_path.is_file():
                    continue
                stat = file_path.stat()
                if datetime.fromtimestamp(stat.st_mtime) >= cutoff:
                    continue
                try:
                    remove_stored_file(str(file_path))
                    deleted_files += 1
                    freed_bytes += stat.st_size
                except CleanupFailure as e:
                    failed += 1
                    logger.warning("Stored file cleanup failed", file_path=str(file_path), error=str(e))
            
            # Remove empty session directory
            if dir_is_old:
                try:
                    entry.rmdir()
                    deleted_dirs += 1
                except OSError:
                    pass  # Directory not empty
        
        logger.info(
            "Upload directory cleanup completed",
            deleted_files=deleted_files,
            deleted_dirs=deleted_dirs,
            failed=failed,
            freed_mb=round(freed_bytes / (1024 * 1024), 2),
        )
        
        return {
            "deleted_files": deleted_files,
            "deleted_dirs": deleted_dirs,
            "failed": failed,
            "freed_bytes": freed_bytes,
        }
