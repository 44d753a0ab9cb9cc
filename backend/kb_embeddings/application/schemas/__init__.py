from .document import (
    DeleteEmbeddingsResponse,
    DocumentCreate,
    DocumentResponse,
    DocumentSaveResponse,
    DocumentUpdate,
    EmbedResponse,
)
from .similarity import (
    DocumentRefResponse,
    SimilarDocumentResponse,
    SimilarDocumentsResponse,
    SimilarPairResponse,
    SimilarPairsResponse,
)

__all__ = [
    "DeleteEmbeddingsResponse",
    "DocumentCreate",
    "DocumentResponse",
    "DocumentSaveResponse",
    "DocumentUpdate",
    "EmbedResponse",
    "DocumentRefResponse",
    "SimilarDocumentResponse",
    "SimilarDocumentsResponse",
    "SimilarPairResponse",
    "SimilarPairsResponse",
]
