"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from kb_embeddings.config import get_settings
from kb_embeddings.application.services import DocumentLockRegistry
from kb_embeddings.infrastructure.database import Base, engine
from kb_embeddings.infrastructure.logging.log_config import setup_logging
from kb_embeddings.presentation.api.v1.router import router as v1_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — create tables, open the shared HTTP client."""
    settings = get_settings()
    setup_logging()

    # 1. Create all database tables (enable pgvector extension first)
    async with engine.begin() as conn:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        await conn.run_sync(Base.metadata.create_all)

    if not settings.openrouter_api_key.strip():
        logger.warning(
            "OPENROUTER_API_KEY is not configured; embedding runs will fail until it is set."
        )

    # 2. One HTTP client and one lock registry for every request
    app.state.http_client = httpx.AsyncClient(timeout=settings.embedding_request_timeout)
    app.state.document_locks = DocumentLockRegistry()

    yield

    # Shutdown
    await app.state.http_client.aclose()
    await engine.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(v1_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "kb_embeddings.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
