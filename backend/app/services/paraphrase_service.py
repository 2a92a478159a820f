"""
Paraphrase Service
==================
Runs one paraphrase request end to end.

Flow:
1. Validate the request (nothing is stored for a bad request)
2. Create a pending session
3. Run the rewrite pipeline (the oracle call)
4. Store the rewritten text and highlights together
5. Return the response payload
"""

from typing import Any, Dict, Mapping
import structlog

from pipeline import RewriteOrchestrator
from app.services.session_store import SessionStore

logger = structlog.get_logger(__name__)


class ParaphraseService:
    """
    Service for paraphrase requests.
    
    Oracle errors are not retried here. The session stays pending and
    expires on its own; the user can resubmit.
    """
    
    def __init__(self, store: SessionStore, orchestrator: RewriteOrchestrator):
        self.store = store
        self.orchestrator = orchestrator
    
    async def paraphrase(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Paraphrase text and record the session.
        
        Args:
            data: Request fields (text, mode, language, citation_format, style_matching)
        
        Returns:
            Response payload with the new session id
        """
        request = self.orchestrator.validate(data)
        
        session = await self.store.create_session(
            original_text=request.text,
            mode=request.mode,
            language=request.language,
            citation_format=request.citation_format,
        )
        
        try:
            result = await self.orchestrator.rewrite(request)
        except Exception as e:
            logger.error(
                "Paraphrase failed",
                session_id=session.session_id,
                mode=request.mode,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise
        
        highlights = result.highlights_as_dicts()
        await self.store.update_session(
            session.session_id,
            paraphrased_text=result.rewritten_text,
            highlights=highlights,
        )
        
        return {
            "session_id": session.session_id,
            "original_text": request.text,
            "paraphrased_text": result.rewritten_text,
            "highlights": highlights,
            "mode": request.mode,
            "language": request.language,
            "citation_format": request.citation_format,
        }
