"""
Paraphrase API Endpoints
========================
Handles paraphrase requests.

Endpoints:
- POST /paraphrase - Rewrite text in a chosen style
"""

from fastapi import APIRouter, Depends, HTTPException
import structlog

from pipeline import PipelineError
from app.api.deps import get_paraphrase_service
from app.core.errors import AppError
from app.schemas import ParaphraseRequest, ParaphraseResponse
from app.services import ParaphraseService

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/paraphrase", response_model=ParaphraseResponse)
async def paraphrase(
    request: ParaphraseRequest,
    service: ParaphraseService = Depends(get_paraphrase_service),
):
    """
    Paraphrase text.
    
    This endpoint:
    1. Validates the request
    2. Creates a session that expires in two hours
    3. Rewrites the text with the configured LLM
    4. Returns the rewritten text with highlighted changes
    
    Oracle failures return 500 with a message saying what went wrong
    (credentials, quota, rate limit or other).
    """
    try:
        result = await service.paraphrase(request.model_dump())
    except (PipelineError, AppError):
        raise
    except Exception as e:
        logger.exception("Unexpected paraphrase error", error=str(e))
        raise HTTPException(status_code=500, detail="An unexpected error occurred")
    
    return ParaphraseResponse(**result)
