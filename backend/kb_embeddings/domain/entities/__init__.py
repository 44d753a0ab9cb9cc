from .document import Document
from .document_chunk import DocumentChunk
from .embedding import (
    Embedding,
    UnparsedEmbedding,
    Vector,
    parse_embedding,
    resolve_vector,
    to_stored_embedding,
)
from .embedding_run import EmbeddingOutcome, EmbeddingPlan, EmbeddingStatus
from .similarity import (
    DocumentRef,
    SimilarDocument,
    SimilarDocumentsResult,
    SimilarPair,
    SimilarPairsResult,
)

__all__ = [
    "Document",
    "DocumentChunk",
    "Embedding",
    "UnparsedEmbedding",
    "Vector",
    "parse_embedding",
    "resolve_vector",
    "to_stored_embedding",
    "EmbeddingOutcome",
    "EmbeddingPlan",
    "EmbeddingStatus",
    "DocumentRef",
    "SimilarDocument",
    "SimilarDocumentsResult",
    "SimilarPair",
    "SimilarPairsResult",
]
