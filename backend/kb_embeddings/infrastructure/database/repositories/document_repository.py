"""Concrete document repository backed by SQLAlchemy."""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from kb_embeddings.application.interfaces import DocumentRepository
from kb_embeddings.domain.entities import Document, to_stored_embedding
from kb_embeddings.infrastructure.database.models import DocumentModel


class SQLAlchemyDocumentRepository(DocumentRepository):
    """Implements the DocumentRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: DocumentModel) -> Document:
        """Map ORM model → domain entity."""
        return Document(
            id=model.id,
            doc_id=model.doc_id,
            title=model.title,
            parent=model.parent,
            source_filename=model.source_filename,
            html=model.html,
            transcript=model.transcript,
            embedding=to_stored_embedding(model.embedding),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Document) -> DocumentModel:
        """Map domain entity → ORM model (for creation)."""
        return DocumentModel(
            doc_id=entity.doc_id,
            title=entity.title,
            parent=entity.parent,
            source_filename=entity.source_filename,
            html=entity.html,
            transcript=entity.transcript,
        )

    async def get_by_id(self, document_id: int) -> Document | None:
        # another session may have stored the embedding since this one loaded the row
        result = await self._session.get(DocumentModel, document_id, populate_existing=True)
        return self._to_entity(result) if result else None

    async def get_all(self, skip: int = 0, limit: int | None = 100) -> list[Document]:
        stmt = select(DocumentModel).order_by(DocumentModel.id).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def create(self, document: Document) -> Document:
        model = self._to_model(document)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def update(self, document: Document) -> Document:
        model = await self._session.get(DocumentModel, document.id)
        if model is None:
            raise ValueError(f"Document {document.id} not found in database")
        model.title = document.title
        model.parent = document.parent
        model.html = document.html
        model.transcript = document.transcript
        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, document_id: int) -> bool:
        model = await self._session.get(DocumentModel, document_id)
        if model is None:
            return False
        await self._session.delete(model)
        await self._session.flush()
        return True

    async def set_embedding(self, document_id: int, embedding: list[float]) -> None:
        await self._session.execute(
            update(DocumentModel)
            .where(DocumentModel.id == document_id)
            .values(embedding=embedding)
            .execution_options(synchronize_session="fetch")
        )
        await self._session.flush()

    async def get_all_with_embeddings(self) -> list[Document]:
        """Lightweight rows (no content) for every document with an embedding."""
        stmt = (
            select(
                DocumentModel.id,
                DocumentModel.doc_id,
                DocumentModel.title,
                DocumentModel.parent,
                DocumentModel.embedding,
            )
            .where(DocumentModel.embedding.is_not(None))
            .order_by(DocumentModel.id)
        )
        result = await self._session.execute(stmt)
        return [
            Document(
                id=row.id,
                doc_id=row.doc_id,
                title=row.title,
                parent=row.parent,
                embedding=to_stored_embedding(row.embedding),
            )
            for row in result.all()
        ]
