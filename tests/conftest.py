"""Shared test fixtures: in-memory SQLite store, fake rewrite provider, test client."""

from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pipeline import RewriteOrchestrator, RewriteProvider
from app.api.deps import get_file_service, get_orchestrator, get_session_store
from app.main import app
from app.models import Base
from app.services import FileService, SessionStore

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

CAT_PAYLOAD = {
    "paraphrasedText": "The cat sat down on the mat.",
    "changes": [
        {
            "original": "sat",
            "paraphrased": "sat down",
            "type": "grammar",
            "startIndex": 4,
            "endIndex": 12,
        }
    ],
}


class FakeRewriteProvider(RewriteProvider):
    """Returns a canned payload (or raises) and records every call."""

    def __init__(self, payload: Any = None, error: Optional[Exception] = None):
        self.payload = CAT_PAYLOAD if payload is None else payload
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def rewrite(self, system_instruction, response_schema, user_content):
        self.calls.append({
            "system_instruction": system_instruction,
            "response_schema": response_schema,
            "user_content": user_content,
        })
        if self.error is not None:
            raise self.error
        return self.payload


@pytest_asyncio.fixture
async def engine():
    """One in-memory database per test, shared across connections."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def store(session_maker) -> SessionStore:
    return SessionStore(session_maker)


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def file_service(store, upload_dir) -> FileService:
    return FileService(store=store, upload_dir=str(upload_dir))


@pytest.fixture
def provider() -> FakeRewriteProvider:
    return FakeRewriteProvider()


@pytest.fixture
def orchestrator(provider) -> RewriteOrchestrator:
    return RewriteOrchestrator(provider)


@pytest_asyncio.fixture
async def client(store, orchestrator, file_service) -> AsyncClient:
    """Yield an httpx AsyncClient wired to the test store and fake provider."""
    app.dependency_overrides[get_session_store] = lambda: store
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_file_service] = lambda: file_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
