"""SQLAlchemy ORM model for document chunks with pgvector embeddings."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)

from pgvector.sqlalchemy import Vector

from kb_embeddings.infrastructure.database.base import Base
from kb_embeddings.infrastructure.database.models.document import EMBEDDING_DIMENSIONS


class DocumentChunkModel(Base):
    """A text chunk of a knowledge document, with a vector embedding.

    Rows are keyed by (source_id, chunk_index) and written with upserts.
    Title, parent and filename are copied from the document so chunk search
    can filter without a join.
    """

    __tablename__ = "document_chunks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source_id = Column(
        Integer,
        ForeignKey("knowledge_documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chunk_index = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)
    chunk_length = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    parent = Column(String(255), nullable=True)
    source_filename = Column(String(512), nullable=True)
    doc_id = Column(Integer, nullable=True)
    embedding = Column(Vector(EMBEDDING_DIMENSIONS), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("source_id", "chunk_index", name="uq_document_chunk_index"),
        Index("idx_document_chunks_embedding_hnsw", embedding, postgresql_using="hnsw",
              postgresql_ops={"embedding": "vector_cosine_ops"}),
    )
