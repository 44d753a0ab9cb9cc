"""Value objects describing a single embed_document run."""

from dataclasses import dataclass, field
from enum import Enum


@dataclass
class EmbeddingPlan:
    """Which chunk indices of a document still need an embedding."""

    document_id: int
    chunks: list[str] = field(default_factory=list)
    target_indices: list[int] = field(default_factory=list)

    @property
    def total_chunks(self) -> int:
        return len(self.chunks)

    @property
    def is_up_to_date(self) -> bool:
        return not self.target_indices


class EmbeddingStatus(str, Enum):
    """Terminal states of a bounded embedding task."""

    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


@dataclass
class EmbeddingOutcome:
    """Result of a bounded, best-effort embedding task."""

    document_id: int
    status: EmbeddingStatus
    chunks_embedded: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == EmbeddingStatus.COMPLETED
