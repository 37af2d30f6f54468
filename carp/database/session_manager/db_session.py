"""
Async session manager following kkb_fastapi pattern.

``Database.init`` is called once per process (app lifespan, seed script,
test conftest); every ``async with Database() as session`` then opens a
session that commits on success and rolls back on error.
"""
import logging

from sqlalchemy.engine.url import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from carp.database.session_manager.exceptions import (
    DatabaseNotInitialized,
    DatabaseTransactionError,
)

logger = logging.getLogger(__name__)


class Database:
    """Process-wide async engine and session factory."""

    _async_engine: AsyncEngine | None = None
    _async_session_maker: async_sessionmaker | None = None

    def __init__(self):
        self.session: AsyncSession | None = None

    @classmethod
    def init(cls, async_db_url: URL, engine_kw: dict | None = None):
        """
        Create the engine and session maker.

        Args:
            async_db_url: Async database URL
            engine_kw: Extra engine keyword arguments (dropped for sqlite)
        """
        from carp.database.base import get_async_engine

        cls._async_engine = get_async_engine(async_db_url, engine_kw=engine_kw)
        cls._async_session_maker = async_sessionmaker(
            bind=cls._async_engine, expire_on_commit=False, class_=AsyncSession
        )
        logger.info(f"Database initialized for {async_db_url.drivername}")

    @classmethod
    async def dispose(cls):
        """Dispose the engine and forget the session maker."""
        if cls._async_engine is not None:
            await cls._async_engine.dispose()
        cls._async_engine = None
        cls._async_session_maker = None

    async def __aenter__(self) -> AsyncSession:
        if self._async_session_maker is None:
            raise DatabaseNotInitialized(
                "Database not initialized. Call Database.init() first."
            )
        self.session = self._async_session_maker()
        return self.session

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is not None:
                await self.session.rollback()
            else:
                try:
                    await self.session.commit()
                except SQLAlchemyError as e:
                    await self.session.rollback()
                    logger.error(f"Failed to commit session: {e}", exc_info=True)
                    raise DatabaseTransactionError(str(e)) from e
        finally:
            await self.session.close()
