"""Pydantic DTOs (Data Transfer Objects) for the Document feature."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator


class DocumentCreate(BaseModel):
    """Schema for creating a new document. Needs HTML or a transcript."""

    title: str = Field(..., min_length=1, max_length=255, examples=["Onboarding call"])
    html: str | None = Field(None, examples=["<h1>Onboarding</h1><p>...</p>"])
    transcript: str | None = None
    parent: str | None = Field(None, max_length=255, examples=["Sales"])
    source_filename: str | None = Field(None, max_length=512)
    doc_id: int | None = None

    @model_validator(mode="after")
    def _require_content(self) -> "DocumentCreate":
        if not (self.html and self.html.strip()) and not (self.transcript and self.transcript.strip()):
            raise ValueError("Either html or transcript must be provided")
        return self


class DocumentUpdate(BaseModel):
    """Schema for updating an existing document — all fields optional."""

    title: str | None = Field(None, min_length=1, max_length=255)
    html: str | None = None
    transcript: str | None = None
    parent: str | None = Field(None, max_length=255)


class DocumentResponse(BaseModel):
    """Schema returned to the client. The embedding vector itself is never sent."""

    id: int
    doc_id: int | None = None
    title: str
    parent: str | None = None
    source_filename: str | None = None
    html: str | None = None
    transcript: str | None = None
    has_embedding: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DocumentSaveResponse(DocumentResponse):
    """Document plus the outcome of the embedding run triggered by the save."""

    embedding_status: str | None = None
    chunks_embedded: int = 0


class EmbedResponse(BaseModel):
    document_id: int
    chunks_embedded: int


class DeleteEmbeddingsResponse(BaseModel):
    document_id: int
    chunks_deleted: int
