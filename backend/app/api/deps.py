"""
API Dependencies
================
Hands the objects built at startup (see app.main lifespan) to request
handlers. Tests swap them through app.dependency_overrides.
"""

from fastapi import Depends, Request

from pipeline import RewriteOrchestrator
from app.services import FileService, ParaphraseService, SessionStore


def get_session_store(request: Request) -> SessionStore:
    """The process-wide Session Store."""
    return request.app.state.session_store


def get_orchestrator(request: Request) -> RewriteOrchestrator:
    """The process-wide rewrite orchestrator."""
    return request.app.state.orchestrator


def get_file_service(request: Request) -> FileService:
    """The upload service."""
    return request.app.state.file_service


def get_paraphrase_service(
    store: SessionStore = Depends(get_session_store),
    orchestrator: RewriteOrchestrator = Depends(get_orchestrator),
) -> ParaphraseService:
    return ParaphraseService(store, orchestrator)
