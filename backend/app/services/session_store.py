"""
Session Store
=============
Persists paraphrasing sessions and uploaded-file records, each with an
expiry time, and deletes them again.

One store is built at startup (see app.main) and handed to request
handlers and cleanup jobs; nothing reaches it through module globals.

Deleting an uploaded-file row always goes together with deleting its
stored bytes. Byte deletion is best effort: failures are logged and the
row is deleted anyway.
"""

import asyncio
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence

import structlog
from sqlalchemy import delete, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.errors import CleanupFailure, DuplicateSession, SessionNotFound
from app.models import ParaphrasingSession, UploadedFile, utcnow
from app.services.file_service import remove_stored_file

logger = structlog.get_logger(__name__)


SESSION_TTL = timedelta(hours=2)
STALE_MAX_AGE = timedelta(hours=24)

# Fields a caller may change after creation
UPDATABLE_FIELDS = frozenset({"paraphrased_text", "highlights"})


class SessionStore:
    """
    Storage for ParaphrasingSession and UploadedFile records.

    Responsibilities:
    - Create, read and update sessions
    - Record uploads for a session
    - Delete a session with its uploads
    - Sweep expired and stale records
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        ttl: timedelta = SESSION_TTL,
        stale_max_age: timedelta = STALE_MAX_AGE,
        remove_file: Callable[[str], None] = remove_stored_file,
    ):
        if ttl <= timedelta(0):
            raise ValueError("Session TTL must be positive")
        self._session_maker = session_maker
        self.ttl = ttl
        self.stale_max_age = stale_max_age
        self._remove_file = remove_file

    @staticmethod
    def new_session_id() -> str:
        """Generate an opaque session identifier."""
        return str(uuid.uuid4())

    async def ping(self) -> None:
        """Round-trip to the database (raises on failure)."""
        async with self._session_maker() as db:
            await db.execute(text("SELECT 1"))

    # ==================== Sessions ====================

    async def create_session(
        self,
        original_text: str,
        mode: str,
        language: str = "English",
        citation_format: str = "APA",
        session_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ParaphrasingSession:
        """
        Store a new pending session.

        created_at is set here and expires_at is created_at + TTL.

        Raises:
            DuplicateSession: if session_id is already taken
        """
        session_id = session_id or self.new_session_id()
        created_at = now or utcnow()

        session = ParaphrasingSession(
            session_id=session_id,
            original_text=original_text,
            paraphrased_text=None,
            mode=mode,
            language=language,
            citation_format=citation_format,
            highlights=None,
            created_at=created_at,
            updated_at=created_at,
            expires_at=created_at + self.ttl,
        )

        async with self._session_maker() as db:
            existing = await db.execute(
                select(ParaphrasingSession.id).where(ParaphrasingSession.session_id == session_id)
            )
            if existing.scalar_one_or_none() is not None:
                raise DuplicateSession(f"Session {session_id} already exists", session_id=session_id)

            db.add(session)
            try:
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                raise DuplicateSession(
                    f"Session {session_id} already exists", session_id=session_id
                ) from e

        logger.info("Session created", session_id=session_id, mode=mode)
        return session

    async def get_session(self, session_id: str) -> Optional[ParaphrasingSession]:
        """
        Get a session by id.

        Expired records that have not been swept yet are still returned;
        callers compare expires_at with the current time.
        """
        async with self._session_maker() as db:
            result = await db.execute(
                select(ParaphrasingSession).where(ParaphrasingSession.session_id == session_id)
            )
            return result.scalar_one_or_none()

    async def update_session(self, session_id: str, **fields: Any) -> ParaphrasingSession:
        """
        Apply a shallow update to a session.

        Meant to be called once per session, setting paraphrased_text and
        highlights together.

        Raises:
            SessionNotFound: if the session does not exist
            ValueError: if a field is unknown or immutable
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update session fields: {', '.join(sorted(unknown))}")

        async with self._session_maker() as db:
            result = await db.execute(
                select(ParaphrasingSession).where(ParaphrasingSession.session_id == session_id)
            )
            session = result.scalar_one_or_none()
            if session is None:
                raise SessionNotFound("Session not found", session_id=session_id)

            for name, value in fields.items():
                setattr(session, name, value)
            await db.commit()

        return session

    # ==================== Uploaded Files ====================

    async def create_uploaded_file(
        self,
        session_id: str,
        file_name: str,
        file_path: str,
        file_type: str,
        file_size: int,
        extracted_text: Optional[str],
        now: Optional[datetime] = None,
    ) -> UploadedFile:
        """Record an upload. expires_at is uploaded_at + TTL."""
        uploaded_at = now or utcnow()

        uploaded_file = UploadedFile(
            session_id=session_id,
            file_name=file_name,
            file_path=file_path,
            file_type=file_type,
            file_size=file_size,
            extracted_text=extracted_text,
            created_at=uploaded_at,
            updated_at=uploaded_at,
            expires_at=uploaded_at + self.ttl,
        )

        async with self._session_maker() as db:
            db.add(uploaded_file)
            await db.commit()

        logger.info(
            "Upload recorded",
            session_id=session_id,
            file_name=file_name,
            file_size=file_size,
        )
        return uploaded_file

    async def get_files_for_session(self, session_id: str) -> List[UploadedFile]:
        """Get all uploaded files for a session, oldest first."""
        async with self._session_maker() as db:
            result = await db.execute(
                select(UploadedFile)
                .where(UploadedFile.session_id == session_id)
                .order_by(UploadedFile.created_at.asc(), UploadedFile.id.asc())
            )
            return list(result.scalars().all())

    # ==================== Deletion ====================

    async def delete_session(self, session_id: str) -> Dict[str, int]:
        """
        Delete a session and all uploads recorded under its id.

        Stored bytes go first, then the file rows and the session row in
        one transaction. Deleting an unknown id is a no-op.

        Returns:
            Counts of deleted rows and failed byte deletions
        """
        async with self._session_maker() as db:
            result = await db.execute(
                select(UploadedFile).where(UploadedFile.session_id == session_id)
            )
            files = result.scalars().all()

            failed = await self._remove_contents(files)
            deleted_files = await self._delete_file_rows(db, files)

            result = await db.execute(
                delete(ParaphrasingSession).where(ParaphrasingSession.session_id == session_id)
            )
            deleted_sessions = result.rowcount or 0
            await db.commit()

        stats = {
            "deleted_sessions": deleted_sessions,
            "deleted_files": deleted_files,
            "failed_file_cleanups": failed,
        }
        if deleted_sessions or deleted_files:
            logger.info("Session deleted", session_id=session_id, **stats)
        return stats

    async def sweep_expired(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Delete every session and upload whose expires_at has been reached.

        Safe to run repeatedly and alongside request traffic.
        """
        now = now or utcnow()

        async with self._session_maker() as db:
            result = await db.execute(
                select(UploadedFile).where(UploadedFile.expires_at <= now)
            )
            files = result.scalars().all()

            failed = await self._remove_contents(files)
            deleted_files = await self._delete_file_rows(db, files)

            result = await db.execute(
                delete(ParaphrasingSession).where(ParaphrasingSession.expires_at <= now)
            )
            deleted_sessions = result.rowcount or 0
            await db.commit()

        stats = {
            "deleted_sessions": deleted_sessions,
            "deleted_files": deleted_files,
            "failed_file_cleanups": failed,
            "cutoff": now.isoformat(),
        }
        logger.info("Expired records swept", **stats)
        return stats

    async def sweep_stale(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Delete every session and upload created before now - stale_max_age,
        whatever its expires_at says.
        """
        cutoff = (now or utcnow()) - self.stale_max_age

        async with self._session_maker() as db:
            result = await db.execute(
                select(UploadedFile).where(UploadedFile.created_at < cutoff)
            )
            files = result.scalars().all()

            failed = await self._remove_contents(files)
            deleted_files = await self._delete_file_rows(db, files)

            result = await db.execute(
                delete(ParaphrasingSession).where(ParaphrasingSession.created_at < cutoff)
            )
            deleted_sessions = result.rowcount or 0
            await db.commit()

        stats = {
            "deleted_sessions": deleted_sessions,
            "deleted_files": deleted_files,
            "failed_file_cleanups": failed,
            "cutoff": cutoff.isoformat(),
        }
        logger.info("Stale records swept", **stats)
        return stats

    # ==================== Helpers ====================

    async def _remove_contents(self, files: Sequence[UploadedFile]) -> int:
        """Delete stored bytes for each file off the event loop. Returns the number of failures."""
        failed = 0
        for uploaded_file in files:
            try:
                await asyncio.to_thread(self._remove_file, uploaded_file.file_path)
            except CleanupFailure as e:
                failed += 1
                logger.warning(
                    "Stored file cleanup failed",
                    session_id=uploaded_file.session_id,
                    file_path=uploaded_file.file_path,
                    error=str(e),
                )
        return failed

    async def _delete_file_rows(self, db: AsyncSession, files: Sequence[UploadedFile]) -> int:
        if not files:
            return 0
        result = await db.execute(
            delete(UploadedFile).where(UploadedFile.id.in_([f.id for f in files]))
        )
        return result.rowcount or 0
