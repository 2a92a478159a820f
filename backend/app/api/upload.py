"""
Upload API Endpoints
====================
Handles document uploads.

Endpoints:
- POST /upload - Upload a document and extract its text
"""

from typing import Optional
from fastapi import APIRouter, UploadFile, File, Depends, HTTPException
import structlog

from app.api.deps import get_file_service
from app.core.errors import AppError, NoFileUploaded
from app.schemas import FileUploadResponse
from app.services import FileService

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/upload", response_model=FileUploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None, description="TXT, PDF or DOCX file"),
    file_service: FileService = Depends(get_file_service),
):
    """
    Upload a document.
    
    The file will be:
    1. Checked for type and size (rejected before anything is stored)
    2. Saved to disk under a new session id
    3. Converted to plain text
    4. Recorded with a two-hour expiry
    
    Returns the new session id and the extracted text.
    """
    if file is None:
        raise NoFileUploaded("No file uploaded")
    
    # Reject on the declared size before reading the body
    file_service.validate_upload(file.filename, file.content_type, file.size or 0)
    content = await file.read()
    
    try:
        uploaded_file = await file_service.process_upload(
            file_content=content,
            filename=file.filename,
            content_type=file.content_type,
        )
    except AppError as e:
        logger.warning("Upload rejected", file_name=file.filename, error=e.message)
        raise
    except Exception as e:
        logger.exception("Upload failed", file_name=file.filename, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to process uploaded file")
    
    return FileUploadResponse(
        session_id=uploaded_file.session_id,
        file_name=uploaded_file.file_name,
        extracted_text=uploaded_file.extracted_text or "",
        file_size=uploaded_file.file_size,
    )
