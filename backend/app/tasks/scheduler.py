"""
Cleanup Scheduler
=================
Recurring cleanup jobs owned by the API process.

Each job is its own asyncio task: it sleeps for its interval, runs, and
repeats until the scheduler is stopped. A job that raises is logged and
runs again on its next tick.
"""

import asyncio
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional
import structlog

from app.core.config import Settings
from app.services import FileService, SessionStore

logger = structlog.get_logger(__name__)


@dataclass
class ScheduledJob:
    """A coroutine function run every `interval` seconds."""
    name: str
    interval: float
    func: Callable[[], Awaitable[Any]]


class CleanupScheduler:
    """
    Runs scheduled jobs until stopped.
    
    Usage:
        scheduler = CleanupScheduler([ScheduledJob("sweep", 60, store.sweep_expired)])
        scheduler.start()
        ...
        await scheduler.stop()
    """
    
    def __init__(self, jobs: List[ScheduledJob]):
        self.jobs = jobs
        self._tasks: Dict[str, asyncio.Task] = {}
    
    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks.values())
    
    def start(self) -> None:
        """Start one task per job. Must be called inside a running event loop."""
        if self.running:
            return
        for job in self.jobs:
            self._tasks[job.name] = asyncio.create_task(self._run_forever(job), name=job.name)
        logger.info("Cleanup scheduler started", jobs=[job.name for job in self.jobs])
    
    async def stop(self) -> None:
        """Cancel every job and wait for them to finish."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        logger.info("Cleanup scheduler stopped")
    
    async def cancel_job(self, name: str) -> None:
        """Stop a single job and leave the others running."""
        task = self._tasks.pop(name, None)
        if task is not None:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
    
    async def run_once(self, job: ScheduledJob) -> bool:
        """
        Run one tick of a job.
        
        Returns:
            True if the job succeeded
        """
        try:
            result = await job.func()
            logger.debug("Cleanup job finished", job=job.name, result=result)
            return True
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                "Cleanup job failed, will retry on next tick",
                job=job.name,
                error_type=type(e).__name__,
                error=str(e),
            )
            return False
    
    async def _run_forever(self, job: ScheduledJob) -> None:
        while True:
            await asyncio.sleep(job.interval)
            await self.run_once(job)


def build_cleanup_scheduler(
    store: SessionStore,
    file_service: FileService,
    settings: Settings,
    upload_max_age: Optional[timedelta] = None,
) -> CleanupScheduler:
    """
    Create the scheduler with the three cleanup jobs:
    - sweep_expired: records past expires_at
    - sweep_stale: records older than the stale ceiling
    - cleanup_upload_dir: stored files older than the TTL on disk
    """
    max_age = upload_max_age or store.ttl
    
    async def cleanup_upload_dir() -> Dict[str, int]:
        return await asyncio.to_thread(file_service.cleanup_upload_dir, max_age)
    
    return CleanupScheduler([
        ScheduledJob("sweep_expired", settings.sweep_expired_interval_seconds, store.sweep_expired),
        ScheduledJob("sweep_stale", settings.sweep_stale_interval_seconds, store.sweep_stale),
        ScheduledJob("cleanup_upload_dir", settings.upload_dir_sweep_interval_seconds, cleanup_upload_dir),
    ])
