"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from kb_embeddings.config import Settings, get_settings
from kb_embeddings.application.services import (
    DocumentLockRegistry,
    DocumentService,
    EmbeddingService,
    SimilarityService,
)
from kb_embeddings.infrastructure.database.session import async_session_factory, get_db_session
from kb_embeddings.infrastructure.database.unit_of_work import SQLAlchemyUnitOfWork
from kb_embeddings.infrastructure.database.repositories import (
    PgChunkRepository,
    SQLAlchemyDocumentRepository,
)
from kb_embeddings.infrastructure.openrouter import OpenRouterEmbeddingProvider


def build_embedding_provider(
    settings: Settings, http_client: httpx.AsyncClient | None = None
) -> OpenRouterEmbeddingProvider:
    """OpenRouter adapter configured from settings, optionally on a shared client."""
    return OpenRouterEmbeddingProvider(
        api_key=settings.openrouter_api_key.strip(),
        base_url=settings.openrouter_base_url,
        app_name=settings.openrouter_app_name,
        model=settings.embedding_model,
        model_dimensions=settings.embedding_dimensions,
        max_batch_size=settings.embed_batch_size,
        http_referer=settings.openrouter_http_referer,
        timeout=settings.embedding_request_timeout,
        http_client=http_client,
    )


def build_embedding_service(
    session: AsyncSession,
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
    locks: DocumentLockRegistry | None = None,
) -> EmbeddingService:
    """EmbeddingService on one session; it commits after each step. Shared by the API and the CLI."""
    return EmbeddingService(
        embedding_provider=build_embedding_provider(settings, http_client),
        document_repository=SQLAlchemyDocumentRepository(session),
        chunk_repository=PgChunkRepository(session),
        chunk_max_chars=settings.chunk_max_chars,
        chunk_overlap_chars=settings.chunk_overlap_chars,
        batch_size=settings.embed_batch_size,
        locks=locks,
        unit_of_work=SQLAlchemyUnitOfWork(session),
    )


async def get_embedding_service(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[EmbeddingService, None]:
    """Provides an EmbeddingService using the app-wide HTTP client and lock registry."""
    yield build_embedding_service(
        session,
        get_settings(),
        http_client=getattr(request.app.state, "http_client", None),
        locks=getattr(request.app.state, "document_locks", None),
    )


async def get_document_service(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[DocumentService, None]:
    """Provides a DocumentService; saves trigger a bounded embedding run.

    The embedding run gets its own session so its commits and rollbacks never
    touch the request's transaction.
    """
    settings = get_settings()
    async with async_session_factory() as embedding_session:
        embedding_service = build_embedding_service(
            embedding_session,
            settings,
            http_client=getattr(request.app.state, "http_client", None),
            locks=getattr(request.app.state, "document_locks", None),
        )
        yield DocumentService(
            SQLAlchemyDocumentRepository(session),
            embedding_service,
            SQLAlchemyUnitOfWork(session),
            embed_timeout=settings.embed_timeout_seconds,
        )


async def get_similarity_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[SimilarityService, None]:
    """Provides a SimilarityService with its repository wired up."""
    settings = get_settings()
    yield SimilarityService(
        SQLAlchemyDocumentRepository(session),
        top_k=settings.similar_top_k,
        threshold=settings.similar_pairs_threshold,
        round_digits=settings.similarity_round_digits,
    )
