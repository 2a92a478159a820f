"""
Business Logic Services
=======================
"""

from .file_service import FileService, extract_text, remove_stored_file
from .session_store import SessionStore, SESSION_TTL, STALE_MAX_AGE
from .paraphrase_service import ParaphraseService

__all__ = [
    "FileService",
    "extract_text",
    "remove_stored_file",
    "SessionStore",
    "SESSION_TTL",
    "STALE_MAX_AGE",
    "ParaphraseService",
]
