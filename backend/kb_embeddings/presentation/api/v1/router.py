"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from kb_embeddings.presentation.api.v1.endpoints.health import router as health_router
from kb_embeddings.presentation.api.v1.endpoints.similarity import router as similarity_router
from kb_embeddings.presentation.api.v1.endpoints.documents import router as documents_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
# Registered before documents so /documents/similar-pairs is not read as a document id
router.include_router(similarity_router)
router.include_router(documents_router)
