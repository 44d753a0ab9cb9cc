"""Budget-constrained chunk packing.

Sections are packed paragraph by paragraph into chunks of at most
``max_chars`` characters. When a section has to be split, its heading is
prefixed to every chunk so each chunk carries its own context. Paragraphs
that do not fit on their own are cut into overlapping windows.
"""

import re

from kb_embeddings.application.text.html_text import html_to_plain_text, is_html
from kb_embeddings.application.text.normalizer import normalize
from kb_embeddings.application.text.section_splitter import split_sections

_PARAGRAPH_BREAK = re.compile(r"\n[^\S\n]*\n")
_PARAGRAPH_SEPARATOR = "\n\n"


def build_chunks(
    section_text: str,
    heading_text: str | None,
    max_chars: int,
    overlap_chars: int,
) -> list[str]:
    """Split one section's plain text into ordered chunks.

    Every chunk is at most ``max_chars`` long. Text that already fits is
    returned unchanged as a single chunk; empty text yields no chunks.
    """
    if not section_text.strip():
        return []
    if len(section_text) <= max_chars:
        return [section_text]

    paragraphs = _PARAGRAPH_BREAK.split(section_text)
    if heading_text and paragraphs and paragraphs[0].strip() == heading_text:
        paragraphs = paragraphs[1:]

    prefix = f"{heading_text}{_PARAGRAPH_SEPARATOR}" if heading_text else ""
    budget = max_chars - len(prefix)
    if budget <= 0:
        # heading alone would fill the chunk
        prefix = ""
        budget = max_chars

    chunks: list[str] = []
    current = ""

    def flush() -> None:
        nonlocal current
        if current:
            chunks.append((prefix + current).strip())
        current = ""

    for raw in paragraphs:
        paragraph = raw.strip()
        if not paragraph:
            continue

        if len(paragraph) > budget:
            flush()
            chunks.extend((prefix + window).strip() for window in _windows(paragraph, budget, overlap_chars))
            continue

        needed = (len(current) + len(_PARAGRAPH_SEPARATOR) if current else 0) + len(paragraph)
        if needed <= budget:
            current = f"{current}{_PARAGRAPH_SEPARATOR}{paragraph}" if current else paragraph
        else:
            flush()
            current = paragraph

    flush()
    return chunks


def _windows(text: str, size: int, overlap: int) -> list[str]:
    """Fixed-size windows over ``text``; neighbours share ``overlap`` characters."""
    step = max(1, size - max(0, overlap))
    windows: list[str] = []
    start = 0
    while True:
        end = min(start + size, len(text))
        windows.append(text[start:end])
        if end == len(text):
            return windows
        start += step


def chunk_content(document_content: str, max_chars: int, overlap_chars: int) -> list[str]:
    """Chunk a whole document, HTML or plain transcript, in document order."""
    if is_html(document_content):
        chunks: list[str] = []
        for section in split_sections(document_content):
            section_text = html_to_plain_text(section.html_slice)
            chunks.extend(
                c
                for c in build_chunks(section_text, section.heading_text, max_chars, overlap_chars)
                if c
            )
        return chunks

    return build_chunks(normalize(document_content), None, max_chars, overlap_chars)
