from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from flashdeck.core.config import settings

from typing import AsyncIterator
import logging


Base = declarative_base()


connection_string = str(settings.database.connection_string)

engine = create_async_engine(
    connection_string,
    echo=settings.app.mode == "debug",
    pool_pre_ping=True,
)

async_session_maker = async_sessionmaker(
    engine,
    expire_on_commit=False,
)


logger = logging.getLogger(__name__)


async def init_models(bind: AsyncEngine | None = None) -> None:
    """Create all tables known to Base.metadata (dev/test convenience)."""
    # Import models so Base metadata is aware of them
    from flashdeck.core.db import schemas  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncIterator[AsyncSession]:
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"Session rolled back due to error: {e}")
            raise
