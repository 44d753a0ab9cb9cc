from .document_locks import DocumentLockRegistry
from .embedding_service import EmbeddingService
from .similarity_service import SimilarityService
from .document_service import DocumentSaveResult, DocumentService

__all__ = [
    "DocumentLockRegistry",
    "EmbeddingService",
    "SimilarityService",
    "DocumentSaveResult",
    "DocumentService",
]
