"""Application service (use case) for similarity queries."""

from kb_embeddings.application.interfaces import DocumentRepository
from kb_embeddings.application.services.similarity_engine import find_similar, find_similar_pairs
from kb_embeddings.domain.entities import SimilarDocumentsResult, SimilarPairsResult
from kb_embeddings.domain.exceptions import EntityNotFoundError


class SimilarityService:
    """Loads the current embedding snapshot and ranks documents against it."""

    def __init__(
        self,
        repository: DocumentRepository,
        *,
        top_k: int = 15,
        threshold: float = 0.70,
        round_digits: int | None = 3,
    ):
        self._repository = repository
        self._top_k = top_k
        self._threshold = threshold
        self._round_digits = round_digits

    async def similar_documents(
        self, document_id: int, top_k: int | None = None
    ) -> SimilarDocumentsResult:
        if await self._repository.get_by_id(document_id) is None:
            raise EntityNotFoundError("Document", document_id)
        documents = await self._repository.get_all_with_embeddings()
        return find_similar(
            document_id,
            documents,
            top_k=top_k if top_k is not None else self._top_k,
            round_digits=self._round_digits,
        )

    async def similar_pairs(self, threshold: float | None = None) -> SimilarPairsResult:
        documents = await self._repository.get_all_with_embeddings()
        return find_similar_pairs(
            documents,
            threshold=threshold if threshold is not None else self._threshold,
            round_digits=self._round_digits,
        )
