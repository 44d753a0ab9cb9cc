"""Unit tests for the EmbeddingService pipeline."""

import asyncio

import pytest

from kb_embeddings.application.services import DocumentLockRegistry, EmbeddingService
from kb_embeddings.domain.entities import Document, DocumentChunk, EmbeddingStatus
from kb_embeddings.domain.exceptions import MalformedResponseError, NotFoundError, ProviderError
from tests.support.fakes import (
    FakeChunkRepository,
    FakeDocumentRepository,
    FakeEmbeddingProvider,
    FakeUnitOfWork,
)

THREE_PARAGRAPHS = "A" * 40 + "\n\n" + "B" * 40 + "\n\n" + "C" * 40


def _service(
    provider: FakeEmbeddingProvider,
    documents: FakeDocumentRepository,
    chunks: FakeChunkRepository,
    **kwargs,
) -> EmbeddingService:
    options = {"chunk_max_chars": 50, "chunk_overlap_chars": 10}
    options.update(kwargs)
    return EmbeddingService(
        embedding_provider=provider,
        document_repository=documents,
        chunk_repository=chunks,
        **options,
    )


@pytest.fixture
def documents() -> FakeDocumentRepository:
    return FakeDocumentRepository()


@pytest.fixture
def chunks() -> FakeChunkRepository:
    return FakeChunkRepository()


async def _add(documents: FakeDocumentRepository, **fields) -> Document:
    fields.setdefault("title", "Transcript")
    return await documents.create(Document(**fields))


@pytest.mark.asyncio
async def test_first_run_embeds_every_chunk(documents, chunks):
    provider = FakeEmbeddingProvider()
    doc = await _add(documents, transcript=THREE_PARAGRAPHS, parent="Sales", source_filename="call.txt")

    count = await _service(provider, documents, chunks).embed_document(doc.id)

    assert count == 3
    assert chunks.indices(doc.id) == {0, 1, 2}
    stored = chunks.rows[(doc.id, 1)]
    assert stored.content == "B" * 40
    assert stored.chunk_length == 40
    assert stored.title == "Transcript"
    assert stored.parent == "Sales"
    assert stored.source_filename == "call.txt"
    assert stored.embedding == [40.0, 1.0]
    # one full-document call, then one chunk batch
    assert provider.calls[0] == [THREE_PARAGRAPHS]
    assert provider.calls[1] == ["A" * 40, "B" * 40, "C" * 40]
    assert doc.has_embedding


@pytest.mark.asyncio
async def test_second_run_is_idempotent(documents, chunks):
    provider = FakeEmbeddingProvider()
    doc = await _add(documents, transcript=THREE_PARAGRAPHS)
    service = _service(provider, documents, chunks)

    await service.embed_document(doc.id)
    assert await service.embed_document(doc.id) == 0
    # only the full-document embedding is refreshed
    assert provider.calls[2] == [THREE_PARAGRAPHS]
    assert len(provider.calls) == 3


@pytest.mark.asyncio
async def test_incremental_run_embeds_only_missing_indices(documents, chunks):
    provider = FakeEmbeddingProvider()
    doc = await _add(documents, transcript=THREE_PARAGRAPHS)
    await chunks.upsert_chunks(
        [DocumentChunk(source_id=doc.id, chunk_index=1, content="B" * 40, title="T", embedding=[1.0])]
    )

    count = await _service(provider, documents, chunks).embed_document(doc.id)

    assert count == 2
    assert provider.calls[1] == ["A" * 40, "C" * 40]
    assert chunks.rows[(doc.id, 1)].embedding == [1.0]


@pytest.mark.asyncio
async def test_rebuild_replaces_every_chunk(documents, chunks):
    provider = FakeEmbeddingProvider()
    doc = await _add(documents, transcript=THREE_PARAGRAPHS)
    service = _service(provider, documents, chunks)
    await service.embed_document(doc.id)

    assert await service.embed_document(doc.id, rebuild=True) == 3
    assert chunks.full_deletes == 1
    assert chunks.indices(doc.id) == {0, 1, 2}


@pytest.mark.asyncio
async def test_stale_trailing_chunks_are_pruned(documents, chunks):
    provider = FakeEmbeddingProvider()
    doc = await _add(documents, transcript=THREE_PARAGRAPHS)
    await chunks.upsert_chunks(
        [
            DocumentChunk(source_id=doc.id, chunk_index=i, content="old", title="T", embedding=[0.0])
            for i in range(5)
        ]
    )

    count = await _service(provider, documents, chunks).embed_document(doc.id)

    assert count == 0
    assert chunks.indices(doc.id) == {0, 1, 2}


@pytest.mark.asyncio
async def test_batches_respect_batch_size(documents, chunks):
    provider = FakeEmbeddingProvider()
    doc = await _add(documents, transcript=THREE_PARAGRAPHS)

    await _service(provider, documents, chunks, batch_size=2).embed_document(doc.id)

    assert [len(call) for call in provider.calls[1:]] == [2, 1]


@pytest.mark.asyncio
async def test_batch_size_is_capped_by_provider(documents, chunks):
    provider = FakeEmbeddingProvider(max_batch_size=1)
    doc = await _add(documents, transcript=THREE_PARAGRAPHS)

    await _service(provider, documents, chunks, batch_size=100).embed_document(doc.id)

    assert [len(call) for call in provider.calls[1:]] == [1, 1, 1]


@pytest.mark.asyncio
async def test_full_document_failure_does_not_stop_chunks(documents, chunks):
    provider = FakeEmbeddingProvider(fail_on={0})
    doc = await _add(documents, transcript=THREE_PARAGRAPHS)

    count = await _service(provider, documents, chunks).embed_document(doc.id)

    assert count == 3
    assert not doc.has_embedding


@pytest.mark.asyncio
async def test_chunk_batch_failure_propagates(documents, chunks):
    provider = FakeEmbeddingProvider(fail_on={2})
    doc = await _add(documents, transcript=THREE_PARAGRAPHS)
    service = _service(provider, documents, chunks, batch_size=2)

    with pytest.raises(ProviderError):
        await service.embed_document(doc.id)

    # the first batch was persisted; the next run embeds the rest
    assert chunks.indices(doc.id) == {0, 1}
    assert await service.embed_document(doc.id) == 1


@pytest.mark.asyncio
async def test_vector_count_mismatch_is_malformed(documents, chunks):
    provider = FakeEmbeddingProvider(short_on={1})
    doc = await _add(documents, transcript=THREE_PARAGRAPHS)

    with pytest.raises(MalformedResponseError):
        await _service(provider, documents, chunks).embed_document(doc.id)
    assert chunks.indices(doc.id) == set()


@pytest.mark.asyncio
async def test_missing_document_raises_not_found(documents, chunks):
    with pytest.raises(NotFoundError):
        await _service(FakeEmbeddingProvider(), documents, chunks).embed_document(404)


@pytest.mark.asyncio
async def test_document_without_content_embeds_nothing(documents, chunks):
    provider = FakeEmbeddingProvider()
    doc = await _add(documents, transcript="   ")

    assert await _service(provider, documents, chunks).embed_document(doc.id) == 0
    assert provider.calls == []


@pytest.mark.asyncio
async def test_html_document_chunks_by_section_and_derives_title(documents, chunks):
    provider = FakeEmbeddingProvider()
    html = "<h1>Derived Title</h1><p>intro</p><h2>Setup</h2><p>steps</p>"
    doc = await _add(documents, title="", html=html)

    count = await _service(provider, documents, chunks, chunk_max_chars=4500).embed_document(doc.id)

    assert count == 2
    assert chunks.rows[(doc.id, 0)].content == "Derived Title\n\nintro"
    assert chunks.rows[(doc.id, 1)].content == "Setup\n\nsteps"
    assert chunks.rows[(doc.id, 0)].title == "Derived Title"
    # the full-document text is plain text, not markup
    assert provider.calls[0] == ["Derived Title\n\nintro\n\nSetup\n\nsteps"]


@pytest.mark.asyncio
async def test_untitled_fallback(documents, chunks):
    doc = await _add(documents, title="", html="<p>no heading here</p>")
    await _service(FakeEmbeddingProvider(), documents, chunks).embed_document(doc.id)
    assert chunks.rows[(doc.id, 0)].title == "Untitled"


@pytest.mark.asyncio
async def test_concurrent_runs_on_one_document_do_not_double_embed(documents, chunks):
    provider = FakeEmbeddingProvider(delay=0.01)
    doc = await _add(documents, transcript=THREE_PARAGRAPHS)
    locks = DocumentLockRegistry()
    service = _service(provider, documents, chunks, locks=locks)

    counts = await asyncio.gather(service.embed_document(doc.id), service.embed_document(doc.id))

    assert sorted(counts) == [0, 3]
    assert len(locks) == 0


# ── Bounded runs ──


@pytest.mark.asyncio
async def test_with_timeout_reports_completed(documents, chunks):
    doc = await _add(documents, transcript=THREE_PARAGRAPHS)
    outcome = await _service(FakeEmbeddingProvider(), documents, chunks).embed_document_with_timeout(
        doc.id, timeout=5
    )
    assert outcome.status == EmbeddingStatus.COMPLETED
    assert outcome.succeeded
    assert outcome.chunks_embedded == 3


@pytest.mark.asyncio
async def test_with_timeout_reports_timed_out(documents, chunks):
    provider = FakeEmbeddingProvider(delay=1.0)
    doc = await _add(documents, transcript=THREE_PARAGRAPHS)

    outcome = await _service(provider, documents, chunks).embed_document_with_timeout(
        doc.id, timeout=0.05
    )

    assert outcome.status == EmbeddingStatus.TIMED_OUT
    assert not outcome.succeeded


@pytest.mark.asyncio
async def test_with_timeout_reports_failure_without_raising(documents, chunks):
    provider = FakeEmbeddingProvider(fail_on={1})
    doc = await _add(documents, transcript=THREE_PARAGRAPHS)

    outcome = await _service(provider, documents, chunks).embed_document_with_timeout(doc.id)

    assert outcome.status == EmbeddingStatus.FAILED
    assert "provider unavailable" in outcome.error


# ── Planning and deletion ──


@pytest.mark.asyncio
async def test_plan_document_lists_missing_indices(documents, chunks):
    provider = FakeEmbeddingProvider()
    doc = await _add(documents, transcript=THREE_PARAGRAPHS)
    service = _service(provider, documents, chunks)

    plan = await service.plan_document(doc.id)
    assert plan.total_chunks == 3
    assert plan.target_indices == [0, 1, 2]
    assert provider.calls == []

    await service.embed_document(doc.id)
    assert (await service.plan_document(doc.id)).is_up_to_date
    assert (await service.plan_document(doc.id, rebuild=True)).target_indices == [0, 1, 2]


@pytest.mark.asyncio
async def test_delete_document_embeddings(documents, chunks):
    doc = await _add(documents, transcript=THREE_PARAGRAPHS)
    service = _service(FakeEmbeddingProvider(), documents, chunks)
    await service.embed_document(doc.id)

    assert await service.delete_document_embeddings(doc.id) == 3
    assert chunks.indices(doc.id) == set()


# ── Commit boundaries ──


class _Transactional:
    """Repositories sharing one staged transaction, as they share a session in production."""

    def __init__(self, *, reject_embeddings: bool = False):
        self.unit_of_work = FakeUnitOfWork()
        self.documents = FakeDocumentRepository(
            self.unit_of_work, reject_embeddings=reject_embeddings
        )
        self.chunks = FakeChunkRepository(self.unit_of_work)

    async def add(self, **fields) -> Document:
        doc = await _add(self.documents, **fields)
        await self.unit_of_work.commit()
        return doc

    def service(self, provider: FakeEmbeddingProvider, **kwargs) -> EmbeddingService:
        return _service(
            provider, self.documents, self.chunks, unit_of_work=self.unit_of_work, **kwargs
        )


@pytest.mark.asyncio
async def test_committed_batches_survive_a_failed_batch():
    store = _Transactional()
    doc = await store.add(transcript=THREE_PARAGRAPHS)
    provider = FakeEmbeddingProvider(fail_on={2})
    service = store.service(provider, batch_size=2)

    with pytest.raises(ProviderError):
        await service.embed_document(doc.id)

    assert store.chunks.indices(doc.id) == {0, 1}
    assert doc.has_embedding
    assert store.unit_of_work.rollbacks == 1
    assert store.unit_of_work.pending == 0

    # the next incremental run only pays for the missing index
    assert await service.embed_document(doc.id) == 1
    assert provider.calls[-1] == ["C" * 40]


@pytest.mark.asyncio
async def test_rebuild_clear_is_committed_before_the_first_batch():
    store = _Transactional()
    doc = await store.add(transcript=THREE_PARAGRAPHS)
    provider = FakeEmbeddingProvider(fail_on={3})
    service = store.service(provider)
    await service.embed_document(doc.id)

    with pytest.raises(ProviderError):
        await service.embed_document(doc.id, rebuild=True)

    assert store.chunks.indices(doc.id) == set()
    assert await service.embed_document(doc.id) == 3


@pytest.mark.asyncio
async def test_rejected_full_document_write_does_not_block_chunks():
    store = _Transactional(reject_embeddings=True)
    doc = await store.add(transcript=THREE_PARAGRAPHS)

    count = await store.service(FakeEmbeddingProvider()).embed_document(doc.id)

    assert count == 3
    assert store.chunks.indices(doc.id) == {0, 1, 2}
    assert not doc.has_embedding
    assert store.unit_of_work.rollbacks == 1
    assert not store.unit_of_work.aborted


@pytest.mark.asyncio
async def test_vectors_of_the_wrong_width_are_never_stored():
    store = _Transactional()
    doc = await store.add(transcript=THREE_PARAGRAPHS)
    service = store.service(FakeEmbeddingProvider(dimensions=3))

    with pytest.raises(MalformedResponseError):
        await service.embed_document(doc.id)

    assert not doc.has_embedding
    assert store.chunks.indices(doc.id) == set()
