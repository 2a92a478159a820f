"""
Create the database tables directly, without Alembic.

Handy for local SQLite databases:
    DATABASE_URL=sqlite+aiosqlite:///./paraphraser.db python init_db.py
"""

import asyncio

from app.core.config import get_settings
from app.db.session import create_engine
from app.models import Base


async def init_models():
    engine = create_engine(get_settings())
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    print("Tables created successfully.")

if __name__ == "__main__":
    asyncio.run(init_models())
