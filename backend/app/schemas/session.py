"""
Session Schemas
===============
Pydantic models for session-related API endpoints.
"""

from datetime import datetime
from typing import Optional, List

from .base import CamelModel
from .paraphrase import HighlightSchema


class SessionResponse(CamelModel):
    """A stored paraphrasing session."""
    
    session_id: str
    original_text: str
    paraphrased_text: Optional[str] = None
    mode: str
    language: str
    citation_format: str
    highlights: Optional[List[HighlightSchema]] = None
    created_at: datetime
    expires_at: datetime


class MessageResponse(CamelModel):
    """Plain acknowledgement."""
    
    message: str
