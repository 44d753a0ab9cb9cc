"""Batch job: embed every knowledge document that has missing chunk embeddings.

Usage:
    python -m kb_embeddings.scripts.embed_all [--rebuild] [--dry-run] [--limit=N] [--verbose]

Each document gets its own session, and the pipeline commits after every
batch. A failure leaves earlier documents and batches committed, so
re-running picks up where it stopped.
"""

import argparse
import asyncio
import logging
import sys

import httpx

from kb_embeddings.config import Settings, get_settings
from kb_embeddings.domain.entities import EmbeddingPlan
from kb_embeddings.domain.exceptions import EmbeddingError
from kb_embeddings.infrastructure.database.session import engine, session_scope
from kb_embeddings.infrastructure.database.repositories import SQLAlchemyDocumentRepository
from kb_embeddings.infrastructure.dependencies import build_embedding_service
from kb_embeddings.infrastructure.logging.log_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kb-embed",
        description="Chunk and embed knowledge documents into the vector store.",
    )
    parser.add_argument(
        "--rebuild",
        action="store_true",
        help="re-embed every chunk instead of only the missing ones",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="report how many chunks would be embedded, without calling the provider",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        metavar="N",
        help="process at most N documents (by ascending id)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="debug-level logs for the job and the pipeline",
    )
    return parser


async def _document_ids(limit: int | None) -> list[int]:
    async with session_scope() as session:
        documents = await SQLAlchemyDocumentRepository(session).get_all(skip=0, limit=limit)
    return [d.id for d in documents]


def _report_plan(plan: EmbeddingPlan) -> None:
    if plan.is_up_to_date:
        logger.info("[dry] %s: up-to-date (%d chunks)", plan.document_id, plan.total_chunks)
    else:
        logger.info(
            "[dry] %s: would embed %d/%d chunks",
            plan.document_id,
            len(plan.target_indices),
            plan.total_chunks,
        )


async def run(args: argparse.Namespace, settings: Settings) -> int:
    """Process documents in id order; returns the process exit code."""
    logger.info(
        "Model=%s maxChars=%d overlap=%d rebuild=%s limit=%s dryRun=%s",
        settings.embedding_model,
        settings.chunk_max_chars,
        settings.chunk_overlap_chars,
        args.rebuild,
        args.limit if args.limit is not None else "none",
        args.dry_run,
    )

    document_ids = await _document_ids(args.limit)
    logger.info("Found %d documents", len(document_ids))

    total_chunks = 0
    total_embedded = 0

    async with httpx.AsyncClient(timeout=settings.embedding_request_timeout) as client:
        for document_id in document_ids:
            try:
                async with session_scope() as session:
                    service = build_embedding_service(session, settings, http_client=client)
                    if args.dry_run:
                        plan = await service.plan_document(document_id, rebuild=args.rebuild)
                        total_chunks += plan.total_chunks
                        _report_plan(plan)
                    else:
                        total_embedded += await service.embed_document(
                            document_id, rebuild=args.rebuild
                        )
            except EmbeddingError as e:
                logger.error("Document %s failed: %s", document_id, e)
                return 1

    if args.dry_run:
        logger.info("Done (dry run). Total chunks: %d.", total_chunks)
    else:
        logger.info(
            "Done. Embedded now: %d chunks across %d documents.", total_embedded, len(document_ids)
        )
    return 0


async def _main(args: argparse.Namespace) -> int:
    try:
        return await run(args, get_settings())
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(overrides={"cli": "DEBUG", "pipeline": "DEBUG"} if args.verbose else None)
    return asyncio.run(_main(args))


if __name__ == "__main__":
    sys.exit(main())
