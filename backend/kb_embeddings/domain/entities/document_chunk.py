"""Domain entity for document chunks, the unit of vector search."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class DocumentChunk:
    """A bounded slice of a document's text, suitable for vector search.

    Identified by ``(source_id, chunk_index)``. Title, parent and filename
    are copied from the document so search results can be filtered
    without a join.
    """

    source_id: int
    chunk_index: int
    content: str
    title: str
    parent: str | None = None
    source_filename: str | None = None
    doc_id: int | None = None
    embedding: list[float] = field(default_factory=list)
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def chunk_length(self) -> int:
        return len(self.content)
