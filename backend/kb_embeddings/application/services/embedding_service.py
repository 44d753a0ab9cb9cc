"""Embedding service — orchestrates chunking, embedding generation, and storage.

This is an application service that coordinates, per document:
1. Embedding the whole document once (best effort)
2. Splitting the content into ordered, heading-aware chunks
3. Diffing against the chunk indices already stored
4. Embedding the missing chunks in batches via the EmbeddingProvider
5. Upserting chunk records via the ChunkRepository

Runs for the same document are serialized through a DocumentLockRegistry.
The full-document vector, a rebuild's clear and every upserted batch are
committed as they happen, so a run interrupted half way leaves some indices
stored and the next incremental run embeds the rest.
"""

import asyncio
import logging
import time

from kb_embeddings.application.interfaces import (
    ChunkRepository,
    DocumentRepository,
    EmbeddingProvider,
    UnitOfWork,
)
from kb_embeddings.application.services.document_locks import DocumentLockRegistry
from kb_embeddings.application.text import (
    chunk_content,
    extract_title_from_html,
    html_to_plain_text,
    is_html,
    normalize,
)
from kb_embeddings.domain.entities import (
    Document,
    DocumentChunk,
    EmbeddingOutcome,
    EmbeddingPlan,
    EmbeddingStatus,
)
from kb_embeddings.domain.exceptions import EmbeddingError, MalformedResponseError, NotFoundError
from kb_embeddings.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)

# ── Chunking constants ──────────────────────────────────────────────
_DEFAULT_CHUNK_MAX_CHARS = 4500
_DEFAULT_CHUNK_OVERLAP_CHARS = 680
_DEFAULT_BATCH_SIZE = 100


class EmbeddingService:
    """Application service for generating and storing document embeddings."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        document_repository: DocumentRepository,
        chunk_repository: ChunkRepository,
        *,
        chunk_max_chars: int = _DEFAULT_CHUNK_MAX_CHARS,
        chunk_overlap_chars: int = _DEFAULT_CHUNK_OVERLAP_CHARS,
        batch_size: int = _DEFAULT_BATCH_SIZE,
        locks: DocumentLockRegistry | None = None,
        unit_of_work: UnitOfWork | None = None,
    ):
        self._embedding_provider = embedding_provider
        self._document_repo = document_repository
        self._chunk_repo = chunk_repository
        self._chunk_max_chars = chunk_max_chars
        self._chunk_overlap_chars = chunk_overlap_chars
        self._batch_size = max(1, min(batch_size, embedding_provider.max_batch_size))
        self._locks = locks or DocumentLockRegistry()
        self._unit_of_work = unit_of_work
        self._log = PipelineLogger("EmbeddingService")

    # ── Public operations ──────────────────────────────────────────

    async def embed_document(self, document_id: int, rebuild: bool = False) -> int:
        """Embed a document's full text and its missing chunks.

        Args:
            document_id: ID of the document to embed.
            rebuild: Replace the whole chunk set instead of embedding only
                the indices that are not stored yet.

        Returns:
            Number of chunks embedded by this call.

        Raises:
            NotFoundError: the document does not exist.
            ProviderError / MalformedResponseError: a chunk batch failed.
        """
        async with self._locks.hold(document_id):
            return await self._embed_document(document_id, rebuild)

    async def embed_document_with_timeout(
        self,
        document_id: int,
        *,
        rebuild: bool = False,
        timeout: float = 60.0,
    ) -> EmbeddingOutcome:
        """Run embed_document under a wall-clock budget; never raises for embedding failures.

        Used after a document is saved: the save stands whatever happens here,
        and a later rebuild can repair missing embeddings.
        """
        try:
            count = await asyncio.wait_for(
                self.embed_document(document_id, rebuild=rebuild), timeout=timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Embedding document %s timed out after %.1fs; continuing without it",
                document_id,
                timeout,
            )
            return EmbeddingOutcome(
                document_id=document_id,
                status=EmbeddingStatus.TIMED_OUT,
                error=f"timed out after {timeout:.1f}s",
            )
        except EmbeddingError as e:
            self._log.step_error(PipelineStage.ERROR, f"Embedding document {document_id} failed", error=e)
            return EmbeddingOutcome(
                document_id=document_id, status=EmbeddingStatus.FAILED, error=str(e)
            )
        except Exception as e:
            logger.exception("Unexpected error embedding document %s", document_id)
            return EmbeddingOutcome(
                document_id=document_id, status=EmbeddingStatus.FAILED, error=str(e)
            )

        return EmbeddingOutcome(
            document_id=document_id,
            status=EmbeddingStatus.COMPLETED,
            chunks_embedded=count,
        )

    async def plan_document(self, document_id: int, rebuild: bool = False) -> EmbeddingPlan:
        """Work out which chunk indices a run would embed, without embedding anything."""
        document = await self._load(document_id)
        if not document.has_content:
            return EmbeddingPlan(document_id=document_id)

        chunks = self._chunk(document)
        if rebuild:
            targets = list(range(len(chunks)))
        else:
            existing = await self._chunk_repo.get_existing_indices(document_id)
            targets = [i for i in range(len(chunks)) if i not in existing]
        return EmbeddingPlan(document_id=document_id, chunks=chunks, target_indices=targets)

    async def delete_document_embeddings(self, document_id: int) -> int:
        """Remove every stored chunk of a document.

        The document's own full-document embedding is left alone; it goes
        away with the document row.
        """
        deleted = await self._chunk_repo.delete_by_document(document_id)
        await self._commit()
        logger.info("Deleted %d chunk embeddings for document %s", deleted, document_id)
        return deleted

    # ── Pipeline ───────────────────────────────────────────────────

    async def _embed_document(self, document_id: int, rebuild: bool) -> int:
        start = time.monotonic()
        document = await self._load(document_id)
        label = document.label
        self._log.step_complete(PipelineStage.LOAD, f"Loaded {label}", rebuild=rebuild)

        if not document.has_content:
            self._log.detail(f"{label}: skipping (no html or transcript)")
            return 0

        self._log.step_start(PipelineStage.PIPELINE, f"Embedding {label}", rebuild=rebuild)

        await self._embed_full_document(document)

        try:
            return await self._embed_chunks(document, rebuild, start)
        except Exception:
            await self._rollback()
            raise

    async def _embed_chunks(self, document: Document, rebuild: bool, start: float) -> int:
        document_id = document.id
        label = document.label
        chunks = self._chunk(document)
        if not chunks:
            self._log.detail(f"{label}: skipping (no valid chunks)")
            return 0
        self._log.step_complete(PipelineStage.CHUNK, f"Split {label} into {len(chunks)} chunks")

        targets = await self._select_targets(document_id, len(chunks), rebuild)
        if not targets:
            self._log.step_complete(
                PipelineStage.COMPLETE, f"{label}: up-to-date", chunks=len(chunks)
            )
            return 0

        title = self._derive_title(document)
        total = 0
        batch_count = (len(targets) + self._batch_size - 1) // self._batch_size

        for batch_no, offset in enumerate(range(0, len(targets), self._batch_size), start=1):
            indices = targets[offset : offset + self._batch_size]
            texts = [chunks[i] for i in indices]

            with self._log.timed_step(
                PipelineStage.EMBED, f"Batch {batch_no}/{batch_count}", size=len(texts)
            ):
                vectors = await self._embedding_provider.embed_batch(texts)
            if len(vectors) != len(texts):
                raise MalformedResponseError(
                    f"Provider returned {len(vectors)} vectors for {len(texts)} chunks"
                )
            self._check_width(vectors)

            rows = [
                DocumentChunk(
                    source_id=document_id,
                    chunk_index=index,
                    content=chunks[index],
                    title=title,
                    parent=document.parent,
                    source_filename=document.source_filename,
                    doc_id=document.doc_id,
                    embedding=vector,
                )
                for index, vector in zip(indices, vectors)
            ]
            await self._chunk_repo.upsert_chunks(rows)
            await self._commit()
            total += len(rows)
            self._log.step_complete(PipelineStage.PERSIST, f"Upserted {len(rows)} chunks for {label}")

        duration_ms = int((time.monotonic() - start) * 1000)
        self._log.step_complete(PipelineStage.COMPLETE, f"{label}: embedded {total} chunks")
        self._log.stats(chunks=len(chunks), embedded=total, duration_ms=duration_ms)
        return total

    async def _load(self, document_id: int) -> Document:
        document = await self._document_repo.get_by_id(document_id)
        if document is None:
            raise NotFoundError(document_id)
        return document

    async def _embed_full_document(self, document: Document) -> None:
        """Store and commit the whole-document vector. Failures are logged, never raised.

        A failed write is rolled back so the chunk phase starts on a usable
        transaction.
        """
        try:
            content = document.content or ""
            full_text = html_to_plain_text(content) if is_html(content) else normalize(content)
            vectors = await self._embedding_provider.embed_batch([full_text])
            if len(vectors) != 1:
                raise MalformedResponseError(
                    f"Expected 1 full-document vector, got {len(vectors)}"
                )
            self._check_width(vectors)
            await self._document_repo.set_embedding(document.id, vectors[0])
            await self._commit()
            self._log.step_complete(
                PipelineStage.FULL_DOC, f"Updated full document embedding for {document.label}"
            )
        except Exception as e:
            await self._rollback()
            self._log.step_warning(
                PipelineStage.FULL_DOC,
                f"Failed to embed full document {document.label} (continuing with chunks)",
                error=e,
            )

    def _check_width(self, vectors: list[list[float]]) -> None:
        """Vectors must match the provider's width before they reach the store."""
        expected = self._embedding_provider.dimensions
        for vector in vectors:
            if len(vector) != expected:
                raise MalformedResponseError(
                    f"Embedding has {len(vector)} dimensions, expected {expected}"
                )

    async def _commit(self) -> None:
        if self._unit_of_work is not None:
            await self._unit_of_work.commit()

    async def _rollback(self) -> None:
        if self._unit_of_work is not None:
            await self._unit_of_work.rollback()

    def _chunk(self, document: Document) -> list[str]:
        chunks = chunk_content(
            document.content or "", self._chunk_max_chars, self._chunk_overlap_chars
        )
        return [c for c in chunks if c and c.strip()]

    async def _select_targets(self, document_id: int, chunk_count: int, rebuild: bool) -> list[int]:
        """Chunk indices to embed; also clears chunk rows the new chunking no longer has."""
        if rebuild:
            deleted = await self._chunk_repo.delete_by_document(document_id)
            await self._commit()
            if deleted:
                self._log.detail(f"Cleared {deleted} stored chunks before rebuild")
            return list(range(chunk_count))

        existing = await self._chunk_repo.get_existing_indices(document_id)
        if any(i >= chunk_count for i in existing):
            pruned = await self._chunk_repo.delete_from_index(document_id, chunk_count)
            await self._commit()
            self._log.detail(f"Pruned {pruned} stale trailing chunks")
        targets = [i for i in range(chunk_count) if i not in existing]
        self._log.step_complete(
            PipelineStage.DIFF, "Diffed against stored chunks", stored=len(existing), missing=len(targets)
        )
        return targets

    @staticmethod
    def _derive_title(document: Document) -> str:
        if document.title:
            return document.title
        if document.html:
            title = extract_title_from_html(document.html)
            if title:
                return title
        return "Untitled"
