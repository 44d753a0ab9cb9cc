"""Document CRUD and embedding endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from kb_embeddings.application.schemas import (
    DeleteEmbeddingsResponse,
    DocumentCreate,
    DocumentResponse,
    DocumentSaveResponse,
    DocumentUpdate,
    EmbedResponse,
)
from kb_embeddings.application.services import DocumentSaveResult, DocumentService, EmbeddingService
from kb_embeddings.domain.exceptions import (
    EntityNotFoundError,
    MalformedResponseError,
    NotFoundError,
    ProviderError,
)
from kb_embeddings.infrastructure.dependencies import get_document_service, get_embedding_service

router = APIRouter(prefix="/documents", tags=["Documents"])


def _save_response(result: DocumentSaveResult) -> DocumentSaveResponse:
    base = DocumentResponse.model_validate(result.document, from_attributes=True)
    return DocumentSaveResponse(
        **base.model_dump(),
        embedding_status=result.embedding.status.value,
        chunks_embedded=result.embedding.chunks_embedded,
    )


@router.get("", response_model=list[DocumentResponse])
async def list_documents(
    skip: int = 0,
    limit: int = 100,
    service: DocumentService = Depends(get_document_service),
) -> list[DocumentResponse]:
    """Retrieve a paginated list of documents."""
    documents = await service.list_documents(skip=skip, limit=limit)
    return [DocumentResponse.model_validate(d, from_attributes=True) for d in documents]


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: int,
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """Retrieve a single document by ID."""
    try:
        document = await service.get_document(document_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return DocumentResponse.model_validate(document, from_attributes=True)


@router.post("", response_model=DocumentSaveResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    data: DocumentCreate,
    service: DocumentService = Depends(get_document_service),
) -> DocumentSaveResponse:
    """Create a document and embed it (bounded, best effort)."""
    result = await service.create_document(data)
    return _save_response(result)


@router.put("/{document_id}", response_model=DocumentSaveResponse)
async def update_document(
    document_id: int,
    data: DocumentUpdate,
    service: DocumentService = Depends(get_document_service),
) -> DocumentSaveResponse:
    """Update a document and rebuild its embeddings (bounded, best effort)."""
    try:
        result = await service.update_document(document_id, data)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return _save_response(result)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: int,
    service: DocumentService = Depends(get_document_service),
) -> None:
    """Delete a document and its chunk embeddings."""
    try:
        await service.delete_document(document_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/{document_id}/embeddings", response_model=EmbedResponse)
async def embed_document(
    document_id: int,
    rebuild: bool = False,
    service: EmbeddingService = Depends(get_embedding_service),
) -> EmbedResponse:
    """Embed the document's missing chunks, or all of them with ``rebuild=true``."""
    try:
        count = await service.embed_document(document_id, rebuild=rebuild)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (ProviderError, MalformedResponseError) as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return EmbedResponse(document_id=document_id, chunks_embedded=count)


@router.delete("/{document_id}/embeddings", response_model=DeleteEmbeddingsResponse)
async def delete_document_embeddings(
    document_id: int,
    documents: DocumentService = Depends(get_document_service),
    service: EmbeddingService = Depends(get_embedding_service),
) -> DeleteEmbeddingsResponse:
    """Remove every stored chunk embedding of a document."""
    try:
        await documents.get_document(document_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    deleted = await service.delete_document_embeddings(document_id)
    return DeleteEmbeddingsResponse(document_id=document_id, chunks_deleted=deleted)
