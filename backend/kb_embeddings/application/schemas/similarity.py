"""Pydantic DTOs for the similarity and near-duplicate queries."""

from pydantic import BaseModel


class SimilarDocumentResponse(BaseModel):
    document_id: int
    doc_id: int | None = None
    title: str
    parent: str | None = None
    similarity: float

    model_config = {"from_attributes": True}


class SimilarDocumentsResponse(BaseModel):
    similar: list[SimilarDocumentResponse]
    message: str | None = None

    model_config = {"from_attributes": True}


class DocumentRefResponse(BaseModel):
    document_id: int
    doc_id: int | None = None
    title: str
    parent: str | None = None

    model_config = {"from_attributes": True}


class SimilarPairResponse(BaseModel):
    doc1: DocumentRefResponse
    doc2: DocumentRefResponse
    similarity: float

    model_config = {"from_attributes": True}


class SimilarPairsResponse(BaseModel):
    pairs: list[SimilarPairResponse]
    total_docs: int
    threshold: float
    message: str | None = None

    model_config = {"from_attributes": True}
