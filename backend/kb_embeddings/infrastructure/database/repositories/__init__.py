from .document_repository import SQLAlchemyDocumentRepository
from .chunk_repository import PgChunkRepository

__all__ = [
    "SQLAlchemyDocumentRepository",
    "PgChunkRepository",
]
