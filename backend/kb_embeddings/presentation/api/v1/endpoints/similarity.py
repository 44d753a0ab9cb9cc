"""Similarity endpoints: related documents and near-duplicate pairs."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from kb_embeddings.application.schemas import SimilarDocumentsResponse, SimilarPairsResponse
from kb_embeddings.application.services import SimilarityService
from kb_embeddings.domain.exceptions import EntityNotFoundError
from kb_embeddings.infrastructure.dependencies import get_similarity_service

router = APIRouter(prefix="/documents", tags=["Similarity"])


@router.get("/similar-pairs", response_model=SimilarPairsResponse)
async def similar_pairs(
    threshold: float | None = Query(None, ge=-1.0, le=1.0),
    service: SimilarityService = Depends(get_similarity_service),
) -> SimilarPairsResponse:
    """All document pairs whose full-document similarity reaches the threshold."""
    result = await service.similar_pairs(threshold=threshold)
    return SimilarPairsResponse.model_validate(result, from_attributes=True)


@router.get("/{document_id}/similar", response_model=SimilarDocumentsResponse)
async def similar_documents(
    document_id: int,
    top_k: int | None = Query(None, ge=1, le=100),
    service: SimilarityService = Depends(get_similarity_service),
) -> SimilarDocumentsResponse:
    """The most similar documents to the given one, best first."""
    try:
        result = await service.similar_documents(document_id, top_k=top_k)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return SimilarDocumentsResponse.model_validate(result, from_attributes=True)
