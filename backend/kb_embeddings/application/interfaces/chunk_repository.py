"""Abstract repository interface (port) for document chunks."""

from abc import ABC, abstractmethod

from kb_embeddings.domain.entities import DocumentChunk


class ChunkRepository(ABC):
    """Port for chunk persistence, keyed by ``(source_id, chunk_index)``."""

    @abstractmethod
    async def get_existing_indices(self, document_id: int) -> set[int]:
        """Return the chunk indices already persisted for a document."""
        ...

    @abstractmethod
    async def upsert_chunks(self, chunks: list[DocumentChunk]) -> None:
        """Insert chunks, replacing any row with the same (source_id, chunk_index)."""
        ...

    @abstractmethod
    async def delete_by_document(self, document_id: int) -> int:
        """Delete all chunks for a document. Returns count of deleted rows."""
        ...

    @abstractmethod
    async def delete_from_index(self, document_id: int, first_index: int) -> int:
        """Delete chunks whose index is >= ``first_index``. Returns count of deleted rows."""
        ...
