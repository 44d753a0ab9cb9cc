"""Whitespace normalization for extracted text."""

import re

_TAB_CR_RUN = re.compile(r"[\t\r]+")
_TRAILING_WS = re.compile(r"[^\S\n]+\n")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")


def normalize(text: str) -> str:
    """Collapse structural whitespace noise.

    - runs of tabs / carriage returns become a single space
    - whitespace before a newline is dropped
    - three or more consecutive newlines become exactly two
    - leading and trailing whitespace is trimmed

    Idempotent: ``normalize(normalize(x)) == normalize(x)``.
    """
    text = _TAB_CR_RUN.sub(" ", text)
    text = _TRAILING_WS.sub("\n", text)
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    return text.strip()
