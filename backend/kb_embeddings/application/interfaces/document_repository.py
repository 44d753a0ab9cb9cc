"""Abstract repository interface (port) for knowledge documents."""

from abc import ABC, abstractmethod

from kb_embeddings.domain.entities import Document


class DocumentRepository(ABC):
    """Port for document persistence — implemented in the infrastructure layer."""

    @abstractmethod
    async def get_by_id(self, document_id: int) -> Document | None:
        """Retrieve a single document by its ID."""
        ...

    @abstractmethod
    async def get_all(self, skip: int = 0, limit: int | None = 100) -> list[Document]:
        """Retrieve documents ordered by ID. ``limit=None`` returns all of them."""
        ...

    @abstractmethod
    async def create(self, document: Document) -> Document:
        """Persist a new document and return it with the generated ID."""
        ...

    @abstractmethod
    async def update(self, document: Document) -> Document:
        """Update an existing document's content fields."""
        ...

    @abstractmethod
    async def delete(self, document_id: int) -> bool:
        """Delete a document. Returns True if deleted, False if not found."""
        ...

    @abstractmethod
    async def set_embedding(self, document_id: int, embedding: list[float]) -> None:
        """Store the full-document embedding vector."""
        ...

    @abstractmethod
    async def get_all_with_embeddings(self) -> list[Document]:
        """Return every document whose full-document embedding is set."""
        ...
