"""Tests for the Session Store: lifetime, updates, deletion and sweeps."""

import threading
from datetime import timedelta

import pytest
from sqlalchemy import func, select

from app.core.errors import CleanupFailure, DuplicateSession, SessionNotFound
from app.models import ParaphrasingSession, UploadedFile, utcnow
from app.services import SessionStore


async def count_rows(session_maker, model) -> int:
    async with session_maker() as db:
        result = await db.execute(select(func.count()).select_from(model))
        return result.scalar_one()


async def add_upload(store, tmp_path, session_id, now=None, name="essay.txt"):
    path = tmp_path / f"{session_id}-{name}"
    path.write_text("Some essay text.")
    return await store.create_uploaded_file(
        session_id=session_id,
        file_name=name,
        file_path=str(path),
        file_type="text/plain",
        file_size=16,
        extracted_text="Some essay text.",
        now=now,
    )


@pytest.mark.asyncio
async def test_ttl_must_be_positive(session_maker):
    with pytest.raises(ValueError):
        SessionStore(session_maker, ttl=timedelta(0))


@pytest.mark.asyncio
async def test_create_session_expires_after_two_hours(store):
    session = await store.create_session("The cat sat.", "formal")

    assert session.expires_at - session.created_at == timedelta(hours=2)
    assert session.is_pending
    assert session.language == "English"
    assert session.citation_format == "APA"

    stored = await store.get_session(session.session_id)
    assert stored is not None
    assert stored.original_text == "The cat sat."
    assert stored.expires_at == session.expires_at


@pytest.mark.asyncio
async def test_duplicate_session_id_is_rejected(store):
    await store.create_session("one", "formal", session_id="fixed-id")

    with pytest.raises(DuplicateSession):
        await store.create_session("two", "formal", session_id="fixed-id")


@pytest.mark.asyncio
async def test_get_unknown_session_returns_none(store):
    assert await store.get_session("missing") is None


@pytest.mark.asyncio
async def test_update_sets_result_fields(store):
    session = await store.create_session("The cat sat.", "simplify")
    highlights = [{"start": 4, "end": 7, "type": "synonym"}]

    await store.update_session(
        session.session_id,
        paraphrased_text="The cat sat down.",
        highlights=highlights,
    )

    stored = await store.get_session(session.session_id)
    assert stored.paraphrased_text == "The cat sat down."
    assert stored.highlights == highlights
    assert stored.expires_at == session.expires_at


@pytest.mark.asyncio
async def test_update_unknown_session_raises(store):
    with pytest.raises(SessionNotFound):
        await store.update_session("missing", paraphrased_text="x")


@pytest.mark.asyncio
async def test_update_refuses_immutable_fields(store):
    session = await store.create_session("text", "formal")
    with pytest.raises(ValueError):
        await store.update_session(session.session_id, expires_at=utcnow())


@pytest.mark.asyncio
async def test_delete_is_idempotent(store):
    session = await store.create_session("text", "formal")

    first = await store.delete_session(session.session_id)
    second = await store.delete_session(session.session_id)

    assert first["deleted_sessions"] == 1
    assert second == {"deleted_sessions": 0, "deleted_files": 0, "failed_file_cleanups": 0}
    assert await store.get_session(session.session_id) is None


@pytest.mark.asyncio
async def test_delete_removes_uploads_and_their_bytes(store, session_maker, tmp_path):
    session = await store.create_session("text", "formal")
    await add_upload(store, tmp_path, session.session_id)
    other = await add_upload(store, tmp_path, "someone-else")

    stats = await store.delete_session(session.session_id)

    assert stats["deleted_files"] == 1
    assert not (tmp_path / f"{session.session_id}-essay.txt").exists()
    assert (tmp_path / "someone-else-essay.txt").exists()
    assert await store.get_files_for_session(session.session_id) == []
    assert [f.id for f in await store.get_files_for_session("someone-else")] == [other.id]


@pytest.mark.asyncio
async def test_sweep_expired_deletes_everything_past_expiry(store, session_maker, tmp_path):
    now = utcnow()
    old = await store.create_session("old", "formal", now=now - timedelta(hours=3))
    boundary = await store.create_session("boundary", "formal", now=now - timedelta(hours=2))
    fresh = await store.create_session("fresh", "formal", now=now)
    await add_upload(store, tmp_path, old.session_id, now=now - timedelta(hours=3))
    await add_upload(store, tmp_path, fresh.session_id, now=now)

    stats = await store.sweep_expired(now=now)

    assert stats["deleted_sessions"] == 2
    assert stats["deleted_files"] == 1
    assert await store.get_session(old.session_id) is None
    assert await store.get_session(boundary.session_id) is None
    assert await store.get_session(fresh.session_id) is not None
    assert not (tmp_path / f"{old.session_id}-essay.txt").exists()
    assert await count_rows(session_maker, UploadedFile) == 1


@pytest.mark.asyncio
async def test_sweep_expired_twice_is_harmless(store):
    now = utcnow()
    await store.create_session("old", "formal", now=now - timedelta(hours=5))

    await store.sweep_expired(now=now)
    stats = await store.sweep_expired(now=now)

    assert stats["deleted_sessions"] == 0


@pytest.mark.asyncio
async def test_sweep_stale_ignores_expiry(session_maker, tmp_path):
    store = SessionStore(session_maker, ttl=timedelta(days=7))
    now = utcnow()
    stale = await store.create_session("stale", "formal", now=now - timedelta(hours=25))
    recent = await store.create_session("recent", "formal", now=now - timedelta(hours=23))
    await add_upload(store, tmp_path, stale.session_id, now=now - timedelta(hours=25))

    # Not expired yet, so the expiry sweep keeps it
    assert (await store.sweep_expired(now=now))["deleted_sessions"] == 0

    stats = await store.sweep_stale(now=now)

    assert stats["deleted_sessions"] == 1
    assert stats["deleted_files"] == 1
    assert await store.get_session(stale.session_id) is None
    assert await store.get_session(recent.session_id) is not None


@pytest.mark.asyncio
async def test_failed_byte_deletion_still_deletes_rows(session_maker, tmp_path):
    def failing_remove(path):
        raise CleanupFailure(f"Could not delete {path}")

    store = SessionStore(session_maker, remove_file=failing_remove)
    now = utcnow()
    session = await store.create_session("old", "formal", now=now - timedelta(hours=3))
    await add_upload(store, tmp_path, session.session_id, now=now - timedelta(hours=3))

    stats = await store.sweep_expired(now=now)

    assert stats["failed_file_cleanups"] == 1
    assert stats["deleted_files"] == 1
    assert await count_rows(session_maker, UploadedFile) == 0
    assert await count_rows(session_maker, ParaphrasingSession) == 0


@pytest.mark.asyncio
async def test_upload_expires_with_session_ttl(store, tmp_path):
    upload = await add_upload(store, tmp_path, "sid")
    assert upload.expires_at - upload.uploaded_at == timedelta(hours=2)


@pytest.mark.asyncio
async def test_byte_deletion_runs_off_the_event_loop(session_maker, tmp_path):
    loop_thread = threading.get_ident()
    removal_threads = []

    def recording_remove(path):
        removal_threads.append(threading.get_ident())

    store = SessionStore(session_maker, remove_file=recording_remove)
    session = await store.create_session("text", "formal")
    await add_upload(store, tmp_path, session.session_id)
    await add_upload(store, tmp_path, session.session_id, name="notes.txt")

    await store.delete_session(session.session_id)

    assert len(removal_threads) == 2
    assert loop_thread not in removal_threads
