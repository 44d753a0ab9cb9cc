"""OpenRouter-based embedding provider — calls the /embeddings endpoint.

Request:  ``{"model": ..., "input": [text, ...]}``
Response: ``{"data": [{"embedding": [float, ...]}, ...]}`` in input order.

One HTTP request per batch; no retries. Retry policy belongs to the caller.
"""

import logging
from typing import Any

import httpx

from kb_embeddings.application.interfaces.embedding_provider import EmbeddingProvider
from kb_embeddings.domain.exceptions import MalformedResponseError, ProviderError

logger = logging.getLogger(__name__)

_DEFAULT_MAX_BATCH_SIZE = 100


class OpenRouterEmbeddingProvider(EmbeddingProvider):
    """Infrastructure adapter — generates embeddings via OpenRouter /embeddings API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        app_name: str = "Knowledge Base Embeddings",
        model: str = "openai/text-embedding-3-small",
        model_dimensions: int = 1536,
        max_batch_size: int = _DEFAULT_MAX_BATCH_SIZE,
        http_referer: str = "",
        timeout: float = 120.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._app_name = app_name
        self._model = model
        self._dimensions = model_dimensions
        self._max_batch_size = max_batch_size
        self._http_referer = http_referer
        self._timeout = timeout
        self._http_client = http_client

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def max_batch_size(self) -> int:
        return self._max_batch_size

    def _get_headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "X-Title": self._app_name,
        }
        if self._http_referer:
            headers["HTTP-Referer"] = self._http_referer
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed one batch of texts with a single request."""
        if not texts:
            return []
        if len(texts) > self._max_batch_size:
            raise ValueError(
                f"Batch of {len(texts)} texts exceeds the maximum of {self._max_batch_size}"
            )
        if not self._api_key:
            raise ProviderError(status_code=0, body="OPENROUTER_API_KEY is not configured")

        url = f"{self._base_url}/embeddings"
        payload: dict[str, Any] = {
            "model": self._model,
            "input": texts,
        }

        client = await self._get_client()
        should_close = self._http_client is None

        try:
            try:
                response = await client.post(
                    url, headers=self._get_headers(), json=payload
                )
            except httpx.HTTPError as exc:
                logger.error("Embedding request failed: %s", exc)
                raise ProviderError(status_code=0, body=str(exc)) from exc

            if not response.is_success:
                error_text = response.text[:500]
                logger.error(
                    "Embedding API error %d: %s", response.status_code, error_text
                )
                raise ProviderError(status_code=response.status_code, body=error_text)

            try:
                data = response.json()
            except ValueError as exc:
                raise MalformedResponseError("Embedding response is not valid JSON") from exc

            result = self._parse_vectors(data, expected=len(texts))

            logger.info(
                "Generated %d embeddings (model=%s, dims=%d)",
                len(result),
                self._model,
                len(result[0]) if result else 0,
            )
            return result

        finally:
            if should_close:
                await client.aclose()

    def _parse_vectors(self, data: Any, expected: int) -> list[list[float]]:
        """Extract the ordered vector list from a response body."""
        items = data.get("data") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise MalformedResponseError("Embedding response has no 'data' array")
        if len(items) != expected:
            raise MalformedResponseError(
                f"Embedding response has {len(items)} vectors for {expected} inputs"
            )

        # Sort by index when the provider supplies one
        if all(isinstance(item, dict) and "index" in item for item in items):
            items = sorted(items, key=lambda item: item["index"])

        vectors: list[list[float]] = []
        for position, item in enumerate(items):
            embedding = item.get("embedding") if isinstance(item, dict) else None
            if not isinstance(embedding, list) or not embedding:
                raise MalformedResponseError(f"Item {position} has no embedding array")
            try:
                vectors.append([float(v) for v in embedding])
            except (TypeError, ValueError) as exc:
                raise MalformedResponseError(
                    f"Item {position} embedding contains non-numeric values"
                ) from exc

        width = len(vectors[0])
        if any(len(v) != width for v in vectors):
            raise MalformedResponseError("Embedding vectors have inconsistent dimensions")
        if width != self._dimensions:
            logger.warning(
                "Embedding width %d differs from configured dimensions %d (model=%s)",
                width,
                self._dimensions,
                self._model,
            )
        return vectors
