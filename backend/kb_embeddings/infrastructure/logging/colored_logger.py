"""Stage-tagged console logging for the embedding pipeline.

Each run of ``embed_document`` moves through a fixed set of stages; every
line is prefixed with the stage tag (and, on a terminal, its color) so a
single document's progress can be followed through interleaved output:

    [LOAD] green · [FULL_DOC] magenta · [CHUNK] yellow · [DIFF] blue
    [EMBED] cyan · [PERSIST] green · [ERROR] red · stats in gray
"""

import logging
import os
import sys
import time
from contextlib import contextmanager
from typing import Any

from kb_embeddings.config import get_settings


# ── ANSI Color Codes ─────────────────────────────────────────────────

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
MAGENTA = "\033[95m"
CYAN = "\033[96m"
WHITE = "\033[97m"
GRAY = "\033[90m"


# ── Pipeline Stage Definitions ───────────────────────────────────────

class PipelineStage:
    """(tag, color) for each step of an embedding run."""

    LOAD = ("LOAD", GREEN)
    FULL_DOC = ("FULL_DOC", MAGENTA)
    CHUNK = ("CHUNK", YELLOW)
    DIFF = ("DIFF", BLUE)
    EMBED = ("EMBED", CYAN)
    PERSIST = ("PERSIST", GREEN)
    PIPELINE = ("PIPELINE", WHITE)
    ERROR = ("ERROR", RED)
    COMPLETE = ("COMPLETE", GREEN)


def _colors_enabled() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    return get_settings().log_color and sys.stderr.isatty()


def _fields(kwargs: dict[str, Any]) -> str:
    return " | ".join(f"{k}={v}" for k, v in kwargs.items())


# ── PipelineLogger ───────────────────────────────────────────────────

class PipelineLogger:
    """Logger wrapper that tags each line with its pipeline stage.

    Usage:
        log = PipelineLogger("EmbeddingService")
        log.step_start(PipelineStage.CHUNK, "Chunking guide.html")
        log.detail("12 chunks")
        log.step_complete(PipelineStage.PERSIST, "Upserted 12 chunks")
    """

    def __init__(self, component_name: str, use_color: bool | None = None):
        self._logger = logging.getLogger(component_name)
        self._use_color = _colors_enabled() if use_color is None else use_color

    def _paint(self, text: str, *codes: str) -> str:
        if not self._use_color or not codes:
            return text
        return "".join(codes) + text + RESET

    def _with_fields(self, line: str, kwargs: dict[str, Any]) -> str:
        if not kwargs:
            return line
        return f"{line} {self._paint(f'({_fields(kwargs)})', GRAY)}"

    def _tag(self, stage: tuple[str, str], *extra: str) -> str:
        label, color = stage
        return self._paint(f"[{label}]", color, *extra)

    def step_start(self, stage: tuple[str, str], message: str, **kwargs: Any) -> None:
        line = f"{self._tag(stage, BOLD)} {self._paint(message, stage[1])}"
        self._logger.info(self._with_fields(line, kwargs))

    def step_complete(self, stage: tuple[str, str], message: str, **kwargs: Any) -> None:
        line = f"{self._tag(stage)} {self._paint(f'✓ {message}', GREEN)}"
        self._logger.info(self._with_fields(line, kwargs))

    def step_warning(self, stage: tuple[str, str], message: str, error: Exception | None = None) -> None:
        """A recoverable problem; the run carries on."""
        line = self._paint(f"[{stage[0]}] {message}", YELLOW)
        if error is not None:
            line += " " + self._paint(f"→ {type(error).__name__}: {error}", DIM)
        self._logger.warning(line)

    def step_error(self, stage: tuple[str, str], message: str, error: Exception | None = None) -> None:
        line = f"{self._paint(f'[{stage[0]}]', RED, BOLD)} {self._paint(message, RED)}"
        if error is not None:
            line += " " + self._paint(f"→ {type(error).__name__}: {error}", DIM)
        self._logger.error(line)

    def detail(self, message: str, **kwargs: Any) -> None:
        line = "   " + self._paint(f"├─ {message}", GRAY)
        self._logger.info(self._with_fields(line, kwargs))

    def stats(self, **kwargs: Any) -> None:
        self._logger.info("   " + self._paint(f"stats: {_fields(kwargs)}", GRAY))

    @contextmanager
    def timed_step(self, stage: tuple[str, str], message: str, **kwargs: Any):
        """Log start and end of a block with its elapsed time.

        Usage:
            with log.timed_step(PipelineStage.EMBED, "Batch 1/3", size=100):
                vectors = await provider.embed_batch(texts)
        """
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            self.step_error(stage, f"{message} failed after {time.perf_counter() - start:.2f}s", error=e)
            raise
        self.step_complete(stage, f"{message} in {time.perf_counter() - start:.2f}s", **kwargs)
