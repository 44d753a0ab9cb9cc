"""Domain entity for knowledge documents."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from kb_embeddings.domain.entities.embedding import Embedding

_UNCHANGED: Any = object()  # html / transcript take None as "clear"


@dataclass
class Document:
    """A unit of knowledge content: an HTML article or a raw transcript.

    Holds at most one full-document embedding, independent of the chunk-level
    embeddings stored alongside it.
    """

    title: str
    html: str | None = None
    transcript: str | None = None
    parent: str | None = None
    source_filename: str | None = None
    doc_id: int | None = None  # display id shown to users
    embedding: Embedding | None = None
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def content(self) -> str | None:
        """The text that gets chunked: HTML when present, else the transcript."""
        return self.html or self.transcript

    @property
    def has_content(self) -> bool:
        content = self.content
        return bool(content and content.strip())

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None

    @property
    def label(self) -> str:
        """Human-readable identifier for log lines."""
        return self.source_filename or str(self.doc_id or self.id)

    def update(
        self,
        title: str | None = None,
        html: str | None = _UNCHANGED,
        transcript: str | None = _UNCHANGED,
        parent: str | None = None,
    ) -> None:
        """Update document fields and refresh the updated_at timestamp.

        ``title`` and ``parent`` are left alone when None. ``html`` and
        ``transcript`` are replaced whenever they are passed, so passing None
        clears them (turning an article into a transcript, for example).
        """
        if title is not None:
            self.title = title
        if html is not _UNCHANGED:
            self.html = html
        if transcript is not _UNCHANGED:
            self.transcript = transcript
        if parent is not None:
            self.parent = parent
        self.updated_at = datetime.now(timezone.utc)
