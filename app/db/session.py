from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.config import settings

engine_options = {"pool_pre_ping": True}
if settings.TESTING:
    # Tests drive the engine from more than one event loop
    engine_options["poolclass"] = NullPool

engine = create_async_engine(settings.DATABASE_URI, **engine_options)

SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request."""
    async with SessionLocal() as session:
        yield session
