"""
Cleanup Tasks
=============
Celery versions of the cleanup jobs, for CLEANUP_MODE=celery.

Each task builds its own engine and store, runs one sweep and disposes
of the engine again.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict
import structlog

from app.core.celery_app import celery_app
from app.core.config import get_settings
from app.db.session import create_engine, create_session_maker
from app.services import FileService, SessionStore

logger = structlog.get_logger(__name__)
settings = get_settings()


async def _with_store(action: Callable[[SessionStore], Awaitable[Dict[str, Any]]]) -> Dict[str, Any]:
    """Run an action against a short-lived store."""
    engine = create_engine(settings)
    try:
        store = SessionStore(
            create_session_maker(engine),
            ttl=settings.session_ttl,
            stale_max_age=settings.stale_max_age,
        )
        return await action(store)
    finally:
        await engine.dispose()


@celery_app.task(name="app.tasks.cleanup.sweep_expired_sessions")
def sweep_expired_sessions() -> dict:
    """
    Delete sessions and uploads past their expiry time.
    
    Returns:
        Statistics about deleted records
    """
    logger.info("Starting expired session sweep")
    return asyncio.run(_with_store(lambda store: store.sweep_expired()))


@celery_app.task(name="app.tasks.cleanup.sweep_stale_sessions")
def sweep_stale_sessions() -> dict:
    """
    Delete sessions and uploads older than the stale age ceiling.
    
    Returns:
        Statistics about deleted records
    """
    logger.info("Starting stale session sweep", max_age_hours=settings.stale_max_age_hours)
    return asyncio.run(_with_store(lambda store: store.sweep_stale()))


@celery_app.task(name="app.tasks.cleanup.cleanup_upload_dir")
def cleanup_upload_dir() -> dict:
    """
    Delete stored uploads older than the session TTL.
    
    Returns:
        Statistics about cleaned up files
    """
    logger.info("Starting upload directory cleanup", upload_dir=settings.upload_dir)
    return FileService(upload_dir=settings.upload_dir, settings=settings).cleanup_upload_dir(
        settings.session_ttl
    )
