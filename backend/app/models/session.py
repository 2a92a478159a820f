"""
Paraphrasing Session Model
==========================
One rewrite transaction.

A session is created pending (no paraphrased text), filled in once when
the oracle answers, and deleted by an explicit clear, the expiry sweep
or the stale sweep.
"""

from datetime import datetime
from typing import Optional, List, Dict, Any
from sqlalchemy import String, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ParaphrasingSession(Base):
    """
    Paraphrasing session model.
    
    Attributes:
        session_id: Opaque identifier (UUID) generated by the server
        original_text: Text submitted by the user (never changes)
        paraphrased_text: Oracle output, NULL while pending
        mode: academic, formal, creative, seo or simplify
        language: Target language label
        citation_format: APA, MLA or Chicago
        highlights: List of {start, end, type} spans over paraphrased_text
        expires_at: created_at + TTL
    """
    
    __tablename__ = "paraphrasing_sessions"
    
    session_id: Mapped[str] = mapped_column(
        String(36),
        unique=True,
        index=True,
        nullable=False,
    )
    
    # ----- Request -----
    original_text: Mapped[str] = mapped_column(Text, nullable=False)
    mode: Mapped[str] = mapped_column(String(20), nullable=False)
    language: Mapped[str] = mapped_column(String(64), nullable=False, default="English")
    citation_format: Mapped[str] = mapped_column(String(16), nullable=False, default="APA")
    
    # ----- Result (set together, exactly once) -----
    paraphrased_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    highlights: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(JSON, nullable=True)
    
    # ----- Lifetime -----
    expires_at: Mapped[datetime] = mapped_column(index=True, nullable=False)
    
    @property
    def is_pending(self) -> bool:
        return self.paraphrased_text is None
    
    def is_expired(self, now: datetime) -> bool:
        """True once expires_at has been reached."""
        return self.expires_at <= now
    
    def __repr__(self) -> str:
        return f"<ParaphrasingSession(id={self.id}, session_id={self.session_id[:8]}...)>"
