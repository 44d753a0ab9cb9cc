from .document_repository import DocumentRepository
from .chunk_repository import ChunkRepository
from .embedding_provider import EmbeddingProvider
from .unit_of_work import UnitOfWork

__all__ = [
    "DocumentRepository",
    "ChunkRepository",
    "EmbeddingProvider",
    "UnitOfWork",
]
