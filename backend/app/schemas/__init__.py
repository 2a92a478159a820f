"""
Pydantic Schemas Package
========================
API request/response models for validation.
"""

from .paraphrase import HighlightSchema, ParaphraseRequest, ParaphraseResponse
from .session import SessionResponse, MessageResponse
from .file import FileUploadResponse

__all__ = [
    "HighlightSchema",
    "ParaphraseRequest",
    "ParaphraseResponse",
    "SessionResponse",
    "MessageResponse",
    "FileUploadResponse",
]
