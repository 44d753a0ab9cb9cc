"""Application service (use case) for Document operations.

Saving a document commits it, then triggers a bounded, best-effort embedding
run; deleting it removes its chunk embeddings first.
"""

from dataclasses import dataclass

from kb_embeddings.application.interfaces import DocumentRepository, UnitOfWork
from kb_embeddings.application.schemas import DocumentCreate, DocumentUpdate
from kb_embeddings.application.services.embedding_service import EmbeddingService
from kb_embeddings.domain.entities import Document, EmbeddingOutcome
from kb_embeddings.domain.exceptions import EntityNotFoundError


@dataclass
class DocumentSaveResult:
    document: Document
    embedding: EmbeddingOutcome


class DocumentService:
    """Orchestrates document business logic. Depends on the repository port (DI).

    The embedding service should run on its own unit of work: the save is
    committed before embedding starts and stands whatever the run does.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        embedding_service: EmbeddingService,
        unit_of_work: UnitOfWork | None = None,
        *,
        embed_timeout: float = 60.0,
    ):
        self._repository = repository
        self._embedding_service = embedding_service
        self._unit_of_work = unit_of_work
        self._embed_timeout = embed_timeout

    async def get_document(self, document_id: int) -> Document:
        document = await self._repository.get_by_id(document_id)
        if document is None:
            raise EntityNotFoundError("Document", document_id)
        return document

    async def list_documents(self, skip: int = 0, limit: int = 100) -> list[Document]:
        return await self._repository.get_all(skip=skip, limit=limit)

    async def create_document(self, data: DocumentCreate) -> DocumentSaveResult:
        document = Document(
            title=data.title,
            html=data.html,
            transcript=data.transcript,
            parent=data.parent,
            source_filename=data.source_filename,
            doc_id=data.doc_id,
        )
        document = await self._repository.create(document)
        await self._commit()
        return await self._embed_after_save(document.id)

    async def update_document(self, document_id: int, data: DocumentUpdate) -> DocumentSaveResult:
        document = await self.get_document(document_id)
        # explicit nulls clear html / transcript; omitted fields stay as they are
        document.update(**data.model_dump(exclude_unset=True))
        await self._repository.update(document)
        await self._commit()
        return await self._embed_after_save(document_id)

    async def delete_document(self, document_id: int) -> bool:
        await self.get_document(document_id)
        await self._embedding_service.delete_document_embeddings(document_id)
        deleted = await self._repository.delete(document_id)
        await self._commit()
        return deleted

    async def _embed_after_save(self, document_id: int) -> DocumentSaveResult:
        # Chunk boundaries and copied titles may all have shifted
        outcome = await self._embedding_service.embed_document_with_timeout(
            document_id, rebuild=True, timeout=self._embed_timeout
        )
        return DocumentSaveResult(document=await self.get_document(document_id), embedding=outcome)

    async def _commit(self) -> None:
        if self._unit_of_work is not None:
            await self._unit_of_work.commit()
