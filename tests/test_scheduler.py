"""Tests for the in-process cleanup scheduler."""

import asyncio

import pytest

from app.core.config import get_settings
from app.tasks import CleanupScheduler, ScheduledJob, build_cleanup_scheduler


@pytest.mark.asyncio
async def test_run_once_reports_success_and_failure():
    async def ok():
        return {"deleted_sessions": 0}

    async def broken():
        raise RuntimeError("database is locked")

    scheduler = CleanupScheduler([])
    assert await scheduler.run_once(ScheduledJob("ok", 1, ok)) is True
    assert await scheduler.run_once(ScheduledJob("broken", 1, broken)) is False


@pytest.mark.asyncio
async def test_failing_job_keeps_running():
    calls = []

    async def flaky():
        calls.append(1)
        raise RuntimeError("database is locked")

    scheduler = CleanupScheduler([ScheduledJob("flaky", 0.01, flaky)])
    scheduler.start()
    await asyncio.sleep(0.2)

    assert scheduler.running
    await scheduler.stop()

    assert len(calls) >= 2
    assert not scheduler.running


@pytest.mark.asyncio
async def test_jobs_are_cancelled_independently():
    counts = {"a": 0, "b": 0}

    def counter(name):
        async def job():
            counts[name] += 1
        return job

    scheduler = CleanupScheduler([
        ScheduledJob("a", 0.01, counter("a")),
        ScheduledJob("b", 0.01, counter("b")),
    ])
    scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.cancel_job("a")
    frozen = counts["a"]
    await asyncio.sleep(0.1)

    assert counts["a"] == frozen
    assert counts["b"] > 0
    assert scheduler.running
    await scheduler.stop()


@pytest.mark.asyncio
async def test_stop_before_first_tick_runs_nothing():
    calls = []

    async def job():
        calls.append(1)

    scheduler = CleanupScheduler([ScheduledJob("slow", 60, job)])
    scheduler.start()
    await scheduler.stop()

    assert calls == []


@pytest.mark.asyncio
async def test_cleanup_scheduler_has_the_three_jobs(store, file_service):
    settings = get_settings()
    scheduler = build_cleanup_scheduler(store, file_service, settings)

    intervals = {job.name: job.interval for job in scheduler.jobs}
    assert intervals == {
        "sweep_expired": settings.sweep_expired_interval_seconds,
        "sweep_stale": settings.sweep_stale_interval_seconds,
        "cleanup_upload_dir": settings.upload_dir_sweep_interval_seconds,
    }

    upload_job = next(job for job in scheduler.jobs if job.name == "cleanup_upload_dir")
    stats = await upload_job.func()
    assert stats["deleted_files"] == 0
