"""
Session API Endpoints
=====================
Read and clear paraphrasing sessions.

Endpoints:
- GET /session/{session_id} - Get a session
- GET /session/{session_id}/files - List uploads recorded under a session id
- DELETE /session/{session_id} - Clear a session
- POST /session/{session_id}/cleanup - Clear a session when the page closes
"""

from typing import Any, Dict, List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
import structlog

from app.api.deps import get_session_store
from app.core.errors import SessionExpired, SessionNotFound
from app.models import utcnow
from app.schemas import MessageResponse, SessionResponse
from app.services import SessionStore

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/session/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
):
    """
    Get a session.
    
    Returns 410 for a session past its expiry time even if the cleanup
    sweep has not deleted it yet.
    """
    session = await store.get_session(session_id)
    
    if session is None:
        raise SessionNotFound("Session not found", session_id=session_id)
    
    if session.is_expired(utcnow()):
        raise SessionExpired("Session expired", session_id=session_id)
    
    return SessionResponse.model_validate(session)


@router.get("/session/{session_id}/files")
async def list_session_files(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> Dict[str, Any]:
    """
    List uploads recorded under a session id.
    """
    now = utcnow()
    files = await store.get_files_for_session(session_id)
    file_list: List[Dict[str, Any]] = [f.to_dict() for f in files if f.expires_at > now]
    
    return {
        "sessionId": session_id,
        "files": file_list,
        "totalCount": len(file_list),
    }


async def _clear_session(store: SessionStore, session_id: str, failure_message: str) -> None:
    try:
        await store.delete_session(session_id)
    except SQLAlchemyError as e:
        logger.error("Session clear failed", session_id=session_id, error=str(e))
        raise HTTPException(status_code=500, detail=failure_message)


@router.delete("/session/{session_id}", response_model=MessageResponse)
async def clear_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
):
    """
    Clear a session.
    
    This will:
    1. Remove its uploaded files from disk
    2. Delete the upload records and the session record
    
    Clearing an unknown or already cleared session succeeds.
    """
    await _clear_session(store, session_id, "Failed to clear session")
    return MessageResponse(message="Session cleared successfully")


@router.post("/session/{session_id}/cleanup", response_model=MessageResponse)
async def cleanup_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
):
    """
    Clear a session when the user leaves the page (sent on beforeunload).
    """
    await _clear_session(store, session_id, "Failed to cleanup session")
    return MessageResponse(message="User session cleaned up successfully")
