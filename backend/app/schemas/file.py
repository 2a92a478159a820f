"""
File Schemas
============
Pydantic models for the file upload endpoint.
"""

from pydantic import Field

from .base import CamelModel


class FileUploadResponse(CamelModel):
    """Response body after file upload."""
    
    session_id: str = Field(
        ...,
        description="Session issued for this upload",
    )
    file_name: str
    extracted_text: str = Field(
        ...,
        description="Plain text extracted from the file",
    )
    file_size: int = Field(
        ...,
        description="Size in bytes",
    )
