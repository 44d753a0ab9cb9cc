"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class EmbeddingError(Exception):
    """Base class for failures in the chunking / embedding / similarity pipeline."""


class ProviderError(EmbeddingError):
    """Raised when the embedding provider call does not succeed.

    Covers network failures, authentication and rate limiting.
    A ``status_code`` of 0 means no HTTP response was received.
    """

    def __init__(self, status_code: int, body: str, provider: str = "openrouter"):
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(f"[{provider}] {status_code}: {body}")


class MalformedResponseError(EmbeddingError):
    """Raised when the provider response lacks the expected vector array shape."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(EmbeddingError):
    """Raised when the document to embed does not exist."""

    def __init__(self, document_id: int):
        self.document_id = document_id
        super().__init__(f"Document '{document_id}' not found")


class ParseError(EmbeddingError):
    """Raised when a stored embedding cannot be parsed into a numeric vector."""

    def __init__(self, raw: str, reason: str = ""):
        self.raw = raw
        self.reason = reason
        preview = raw[:60] + ("..." if len(raw) > 60 else "")
        super().__init__(f"Could not parse embedding {preview!r}: {reason}".rstrip(": "))
