"""
Uploaded File Model
===================
Stores metadata about uploaded documents and their extracted text.

The original bytes are stored on disk under the upload directory;
deleting a row must be paired with deleting that file.
"""

from datetime import datetime
from typing import Optional, Dict, Any
from sqlalchemy import String, Text, Integer
from sqlalchemy.orm import Mapped, mapped_column, synonym

from .base import Base


class UploadedFile(Base):
    """
    Uploaded file metadata model.
    
    Attributes:
        session_id: Session token the upload was issued (not a foreign key:
            an upload can exist without a paraphrasing session)
        file_name: Original filename (e.g., "essay.txt")
        file_path: Storage path on disk
        file_type: MIME type
        file_size: Size in bytes
        extracted_text: Plain text pulled out of the file
        expires_at: uploaded_at + TTL
    """
    
    __tablename__ = "uploaded_files"
    
    session_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    
    # ----- File Information -----
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    file_type: Mapped[str] = mapped_column(String(128), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    extracted_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    
    # ----- Lifetime -----
    expires_at: Mapped[datetime] = mapped_column(index=True, nullable=False)
    
    uploaded_at = synonym("created_at")
    
    def __repr__(self) -> str:
        return f"<UploadedFile(id={self.id}, file_name={self.file_name})>"
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "sessionId": self.session_id,
            "fileName": self.file_name,
            "fileType": self.file_type,
            "fileSize": self.file_size,
            "uploadedAt": self.created_at.isoformat() if self.created_at else None,
            "expiresAt": self.expires_at.isoformat() if self.expires_at else None,
        }
