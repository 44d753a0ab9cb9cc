"""Abstract interface (port) for embedding generation."""

from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """Port for generating text embeddings — implemented in the infrastructure layer."""

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for one batch of texts in a single request.

        Args:
            texts: Texts to embed. Callers keep batches within ``max_batch_size``.

        Returns:
            One vector per input text, in input order, all of the same
            dimensionality.

        Raises:
            ProviderError: the request failed or returned a non-2xx status.
            MalformedResponseError: the response has no usable vector array.
        """
        ...

    @property
    @abstractmethod
    def max_batch_size(self) -> int:
        """Maximum number of texts accepted by a single ``embed_batch`` call."""
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Return the dimensionality of the embedding vectors produced by this provider."""
        ...
