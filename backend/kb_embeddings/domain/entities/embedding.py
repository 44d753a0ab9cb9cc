"""Stored embedding values.

Vector columns come back from storage either as native numeric arrays or as
pgvector's bracketed text form (``"[0.1,0.2,...]"``). Both are folded into
one tagged union at the storage boundary and resolved by ``parse_embedding``.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

from kb_embeddings.domain.exceptions import ParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vector:
    """An already-numeric embedding."""

    values: tuple[float, ...]


@dataclass(frozen=True)
class UnparsedEmbedding:
    """An embedding still in serialized ``[a,b,...]`` form."""

    raw: str


Embedding = Vector | UnparsedEmbedding


def to_stored_embedding(raw: Any) -> Embedding | None:
    """Wrap a raw storage value in the Embedding union.

    This is the only place that inspects the runtime shape of a stored vector.
    Anything that is neither text nor iterable becomes an unparsed value so
    that ``parse_embedding`` reports it uniformly.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        return UnparsedEmbedding(raw)
    try:
        # numpy arrays (pgvector driver), lists and tuples
        return Vector(tuple(float(v) for v in raw))
    except (TypeError, ValueError):
        return UnparsedEmbedding(repr(raw))


def resolve_vector(embedding: Embedding) -> list[float]:
    """Return the numeric form of an embedding, raising ParseError on bad input."""
    if isinstance(embedding, Vector):
        return list(embedding.values)

    text = embedding.raw.strip()
    if text.startswith("["):
        text = text[1:]
    if text.endswith("]"):
        text = text[:-1]
    if not text.strip():
        return []

    values: list[float] = []
    for part in text.split(","):
        try:
            value = float(part.strip())
        except ValueError as exc:
            raise ParseError(embedding.raw, str(exc)) from exc
        if not math.isfinite(value):
            raise ParseError(embedding.raw, f"non-finite component {part.strip()!r}")
        values.append(value)
    return values


def parse_embedding(embedding: Embedding | None) -> list[float]:
    """Resolve an embedding to a list of floats; malformed or missing → ``[]``."""
    if embedding is None:
        return []
    try:
        return resolve_vector(embedding)
    except ParseError as exc:
        logger.warning("Treating stored embedding as missing: %s", exc)
        return []
