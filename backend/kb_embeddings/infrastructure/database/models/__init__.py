from .document import DocumentModel
from .document_chunk import DocumentChunkModel

__all__ = [
    "DocumentModel",
    "DocumentChunkModel",
]
