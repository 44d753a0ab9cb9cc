from .base import Base
from .session import engine, async_session_factory, get_db_session
from .unit_of_work import SQLAlchemyUnitOfWork
from .models import DocumentModel, DocumentChunkModel

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
    "get_db_session",
    "SQLAlchemyUnitOfWork",
    "DocumentModel",
    "DocumentChunkModel",
]
