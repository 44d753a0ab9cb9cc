"""UnitOfWork backed by an SQLAlchemy async session."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from kb_embeddings.application.interfaces import UnitOfWork

logger = logging.getLogger(__name__)


class SQLAlchemyUnitOfWork(UnitOfWork):
    """Commits or rolls back the session the repositories were built on."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        # also clears a transaction PostgreSQL has already aborted
        await self._session.rollback()
        logger.debug("Rolled back session %s", id(self._session))
