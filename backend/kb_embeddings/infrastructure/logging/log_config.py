"""Centralized logging configuration.

Each noisy library or layer gets its own level in Settings, so SQL echo or
HTTP wire logs can be turned up without flooding the pipeline output.

Usage:
    from kb_embeddings.infrastructure.logging.log_config import setup_logging
    setup_logging()                          # API server (main.py lifespan)
    setup_logging(overrides={"cli": "DEBUG"})  # batch job with --verbose
"""

import logging
import sys

from kb_embeddings.config import Settings, get_settings


# ── Category → logger names ────────────────────────────────────────
# The Settings field for a category is ``log_level_<category>``.

_CATEGORIES: dict[str, tuple[str, ...]] = {
    "sql": ("sqlalchemy.engine", "sqlalchemy.pool"),
    "http": ("httpx", "httpcore"),
    "uvicorn": ("uvicorn", "uvicorn.access", "uvicorn.error"),
    "pipeline": ("EmbeddingService", "kb_embeddings.application.services"),
    "openrouter": ("kb_embeddings.infrastructure.openrouter",),
    "cli": ("kb_embeddings.scripts",),
}

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_DATE_FORMAT = "%H:%M:%S"


def setup_logging(
    settings: Settings | None = None,
    overrides: dict[str, str] | None = None,
) -> dict[str, int]:
    """Apply root and per-category levels; returns the level chosen per category.

    ``overrides`` maps a category name (or ``"root"``) to a level name and
    wins over Settings.
    """
    settings = settings or get_settings()
    overrides = {k.lower(): v for k, v in (overrides or {}).items()}

    root = logging.getLogger()
    root.setLevel(_parse_level(overrides.get("root", settings.log_level)))

    # uvicorn installs its own handlers; the batch job and tests may not have any
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
        root.addHandler(handler)

    applied: dict[str, int] = {}
    for category, logger_names in _CATEGORIES.items():
        raw = overrides.get(category) or getattr(settings, f"log_level_{category}", "INFO")
        level = _parse_level(raw)
        for name in logger_names:
            logging.getLogger(name).setLevel(level)
        applied[category] = level

    logging.getLogger(__name__).debug(
        "Logging configured: root=%s %s",
        logging.getLevelName(root.level),
        " ".join(f"{c}={logging.getLevelName(lvl)}" for c, lvl in applied.items()),
    )
    return applied


def _parse_level(raw: str) -> int:
    """Level name → logging constant; unknown names fall back to INFO."""
    numeric = logging.getLevelName(raw.strip().upper())
    return numeric if isinstance(numeric, int) else logging.INFO
