"""pgvector-backed ChunkRepository."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from kb_embeddings.application.interfaces import ChunkRepository
from kb_embeddings.domain.entities import DocumentChunk
from kb_embeddings.infrastructure.database.models import DocumentChunkModel

logger = logging.getLogger(__name__)

_UPDATABLE_COLUMNS = (
    "content",
    "chunk_length",
    "title",
    "parent",
    "source_filename",
    "doc_id",
    "embedding",
)


class PgChunkRepository(ChunkRepository):
    """Concrete chunk repository backed by PostgreSQL + pgvector."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_existing_indices(self, document_id: int) -> set[int]:
        result = await self._session.execute(
            select(DocumentChunkModel.chunk_index).where(
                DocumentChunkModel.source_id == document_id
            )
        )
        return set(result.scalars().all())

    async def upsert_chunks(self, chunks: list[DocumentChunk]) -> None:
        """Insert chunks; rows with the same (source_id, chunk_index) are overwritten."""
        if not chunks:
            return

        rows = [
            {
                "source_id": chunk.source_id,
                "chunk_index": chunk.chunk_index,
                "content": chunk.content,
                "chunk_length": chunk.chunk_length,
                "title": chunk.title,
                "parent": chunk.parent,
                "source_filename": chunk.source_filename,
                "doc_id": chunk.doc_id,
                "embedding": chunk.embedding or None,
            }
            for chunk in chunks
        ]

        stmt = insert(DocumentChunkModel).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=[DocumentChunkModel.source_id, DocumentChunkModel.chunk_index],
            set_={name: stmt.excluded[name] for name in _UPDATABLE_COLUMNS},
        )
        await self._session.execute(stmt)
        await self._session.flush()
        logger.info("Upserted %d chunks for document %s", len(rows), chunks[0].source_id)

    async def delete_by_document(self, document_id: int) -> int:
        """Delete all chunks belonging to a document."""
        result = await self._session.execute(
            delete(DocumentChunkModel).where(DocumentChunkModel.source_id == document_id)
        )
        count = result.rowcount
        if count > 0:
            logger.info("Deleted %d chunks for document %s", count, document_id)
        return count

    async def delete_from_index(self, document_id: int, first_index: int) -> int:
        """Delete trailing chunks left over from a longer, earlier chunking."""
        result = await self._session.execute(
            delete(DocumentChunkModel).where(
                DocumentChunkModel.source_id == document_id,
                DocumentChunkModel.chunk_index >= first_index,
            )
        )
        count = result.rowcount
        if count > 0:
            logger.info(
                "Pruned %d chunks at index >= %d for document %s", count, first_index, document_id
            )
        return count
