"""
Service Errors
==============
Errors raised by the session, upload and cleanup services.

Each error knows the HTTP status the API should answer with; the
handlers in app.main do the translation. Oracle and validation errors
come from pipeline.errors.
"""

from typing import Optional


class AppError(Exception):
    """Base class for service errors."""
    
    status_code: int = 500
    
    def __init__(self, message: str, session_id: Optional[str] = None):
        self.message = message
        self.session_id = session_id
        super().__init__(message)


class SessionNotFound(AppError):
    """No session with this id exists."""
    status_code = 404


class SessionExpired(AppError):
    """The session exists but its expiry time has passed."""
    status_code = 410


class DuplicateSession(AppError):
    """A session with this id already exists."""
    status_code = 409


class NoFileUploaded(AppError):
    """The upload request carried no file."""
    status_code = 400


class UnsupportedFileType(AppError):
    """The uploaded file's MIME type is not accepted."""
    status_code = 400


class FileTooLarge(AppError):
    """The uploaded file is over the size cap."""
    status_code = 400


class ExtractionUnsupported(AppError):
    """Known file type whose text extraction is not implemented."""
    status_code = 500


class ExtractionFailed(AppError):
    """Text extraction raised an unexpected error."""
    status_code = 500


class CleanupFailure(AppError):
    """
    Best-effort deletion failed.
    
    Logged by the code that hits it and never returned to a client.
    """
    pass
