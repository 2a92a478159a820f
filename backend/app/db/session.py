"""
Database Engine Setup
=====================
Builds the async engine and session factory from a database URL.

Called once from the FastAPI lifespan (and from the Celery cleanup
tasks), never at import time.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import Settings


def get_database_url(url: str) -> str:
    """
    Convert sync database URL to async URL.
    PostgreSQL: postgresql:// -> postgresql+asyncpg://
    """
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine with production-oriented pool settings for PostgreSQL."""
    url = get_database_url(settings.database_url)
    
    if url.startswith("postgresql+asyncpg://"):
        return create_async_engine(
            url,
            echo=settings.log_level == "DEBUG",  # Log SQL in debug mode
            
            # Connection pool settings
            pool_pre_ping=True,     # Check connection health before use
            pool_size=10,           # Base connection pool size
            max_overflow=20,        # Allow up to 20 extra connections under load
            pool_timeout=30,        # Wait up to 30s for a connection
            pool_recycle=1800,      # Recycle connections after 30 minutes
            
            connect_args={
                "server_settings": {
                    "application_name": "paraphraser_api",  # Identify in pg_stat_activity
                }
            },
        )
    
    return create_async_engine(url, echo=settings.log_level == "DEBUG")


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
