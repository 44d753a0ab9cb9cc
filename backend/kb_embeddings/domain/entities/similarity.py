"""Ranked results returned by the similarity queries."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DocumentRef:
    """The identifying fields of a document in a similarity result."""

    document_id: int
    title: str
    parent: str | None = None
    doc_id: int | None = None


@dataclass(frozen=True)
class SimilarDocument:
    """One neighbour of a target document."""

    document_id: int
    title: str
    similarity: float
    parent: str | None = None
    doc_id: int | None = None


@dataclass(frozen=True)
class SimilarPair:
    """Two documents whose full-document embeddings are near each other."""

    doc1: DocumentRef
    doc2: DocumentRef
    similarity: float


@dataclass
class SimilarDocumentsResult:
    similar: list[SimilarDocument] = field(default_factory=list)
    message: str | None = None


@dataclass
class SimilarPairsResult:
    pairs: list[SimilarPair] = field(default_factory=list)
    total_docs: int = 0
    threshold: float = 0.0
    message: str | None = None
