"""Cosine similarity over full-document embeddings.

Everything here works on an in-memory snapshot of documents; nothing is
indexed. ``find_similar_pairs`` is an exhaustive O(n²) scan meant for
batch use on collections of up to a few thousand documents.
"""

import logging
import math
from collections.abc import Sequence

from kb_embeddings.domain.entities import (
    Document,
    DocumentRef,
    SimilarDocument,
    SimilarDocumentsResult,
    SimilarPair,
    SimilarPairsResult,
    parse_embedding,
)

logger = logging.getLogger(__name__)

NO_SOURCE_EMBEDDING = "Source document has no embedding"
NOT_ENOUGH_EMBEDDINGS = "Not enough documents with embeddings"


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Dot product over the product of Euclidean norms, in [-1, 1].

    Returns 0.0 for vectors of different length, empty vectors, or when
    either norm is zero.
    """
    if len(a) != len(b) or not a:
        return 0.0

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0 or norm_b == 0:
        return 0.0
    similarity = dot / math.sqrt(norm_a * norm_b)
    return max(-1.0, min(1.0, similarity))


def _round(value: float, digits: int | None) -> float:
    return round(value, digits) if digits is not None else value


def _vectors(documents: Sequence[Document]) -> list[tuple[Document, list[float]]]:
    """Parse every embedding once; documents without a usable one are dropped."""
    parsed = []
    for doc in documents:
        vector = parse_embedding(doc.embedding)
        if vector:
            parsed.append((doc, vector))
        else:
            logger.debug("Document %s has no usable embedding; excluded", doc.id)
    return parsed


def find_similar(
    target_document_id: int,
    documents: Sequence[Document],
    top_k: int = 15,
    round_digits: int | None = 3,
) -> SimilarDocumentsResult:
    """Rank every other document by similarity to the target, best first.

    Ties keep the input order. A target without a usable embedding yields an
    empty result carrying an explanatory message.
    """
    parsed = _vectors(documents)
    source = next((vec for doc, vec in parsed if doc.id == target_document_id), None)
    if source is None:
        return SimilarDocumentsResult(similar=[], message=NO_SOURCE_EMBEDDING)

    scored = [
        (doc, cosine_similarity(source, vec))
        for doc, vec in parsed
        if doc.id != target_document_id
    ]
    scored.sort(key=lambda pair: pair[1], reverse=True)

    similar = [
        SimilarDocument(
            document_id=doc.id,
            title=doc.title,
            parent=doc.parent,
            doc_id=doc.doc_id,
            similarity=_round(score, round_digits),
        )
        for doc, score in scored[: max(0, top_k)]
    ]
    logger.info(
        "Similar documents for %s: %d compared, %d returned",
        target_document_id,
        len(scored),
        len(similar),
    )
    return SimilarDocumentsResult(similar=similar)


def _ref(doc: Document) -> DocumentRef:
    return DocumentRef(document_id=doc.id, title=doc.title, parent=doc.parent, doc_id=doc.doc_id)


def find_similar_pairs(
    documents: Sequence[Document],
    threshold: float = 0.70,
    round_digits: int | None = 3,
) -> SimilarPairsResult:
    """All document pairs with similarity >= ``threshold``, best first."""
    parsed = _vectors(documents)
    if len(parsed) < 2:
        return SimilarPairsResult(
            pairs=[], total_docs=len(parsed), threshold=threshold, message=NOT_ENOUGH_EMBEDDINGS
        )

    scored: list[tuple[Document, Document, float]] = []
    for i in range(len(parsed)):
        doc1, vec1 = parsed[i]
        for j in range(i + 1, len(parsed)):
            doc2, vec2 = parsed[j]
            similarity = cosine_similarity(vec1, vec2)
            if similarity >= threshold:
                scored.append((doc1, doc2, similarity))

    scored.sort(key=lambda item: item[2], reverse=True)
    pairs = [
        SimilarPair(doc1=_ref(d1), doc2=_ref(d2), similarity=_round(score, round_digits))
        for d1, d2, score in scored
    ]

    logger.info(
        "Found %d similar pairs above %.0f%% threshold across %d documents",
        len(pairs),
        threshold * 100,
        len(parsed),
    )
    return SimilarPairsResult(pairs=pairs, total_docs=len(parsed), threshold=threshold)
